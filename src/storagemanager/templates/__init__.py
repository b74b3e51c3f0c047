"""Bundled IAM policy templates."""
