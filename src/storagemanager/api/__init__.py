"""HTTP API for the storage manager."""
