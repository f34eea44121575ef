"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

Centralizes selection of the storage backend (in-memory vs PostgreSQL) so
the rest of the app can stay ignorant of where user aggregates live.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the DB backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- LINKBIO_STORAGE_BACKEND: "memory" (default) or "postgres"
- LINKBIO_DB_DSN:          DSN string if backend=="postgres"
"""

import logging
import os
from typing import Optional

from linkbio_platform.storage.base import BaseStorage
from linkbio_platform.storage.storage import Storage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a storage backend based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default) or "postgres". If omitted, reads LINKBIO_STORAGE_BACKEND.
    kwargs : dict
        Extra args passed to the backend constructor. For postgres, use dsn="...".
    """
    be = (backend or os.getenv("LINKBIO_STORAGE_BACKEND", "memory")).strip().lower()
    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("LINKBIO_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env LINKBIO_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from linkbio_platform.storage.db_storage import DBStorage
        return DBStorage(dsn=dsn)

    raise ValueError(f"Unknown storage backend: {be!r}")
