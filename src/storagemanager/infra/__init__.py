"""Infrastructure layer: S3 object operations and the IAM policy store."""

from storagemanager.infra.iam import IamPolicyStore
from storagemanager.infra.s3 import S3Operations

__all__ = [
    "IamPolicyStore",
    "S3Operations",
]
