"""Access policy documents, templates and management."""

from storagemanager.policies.document import PolicyDocument, Statement
from storagemanager.policies.manager import PolicyManager
from storagemanager.policies.store import PolicyStore

__all__ = [
    "PolicyDocument",
    "PolicyManager",
    "PolicyStore",
    "Statement",
]
