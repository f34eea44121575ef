"""
linkbio_platform package initializer.
"""

from . import analytics
from . import manager
from . import storage
from .errors import ConflictError, ErrorKind, LinkbioError, NotFoundError, PersistenceError, ValidationError
from .results import OperationResult
from .service import LinkbioService

__all__ = [
    "analytics",
    "manager",
    "storage",
    "ConflictError",
    "ErrorKind",
    "LinkbioError",
    "LinkbioService",
    "NotFoundError",
    "OperationResult",
    "PersistenceError",
    "ValidationError",
]
