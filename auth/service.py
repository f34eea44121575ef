"""
Core authentication logic.

Maps usernames to salted password hashes and validates HTTP Basic
credentials against them. The authenticated username is the caller
identity; routes resolve it to a user id through the service facade.
"""

import threading
from typing import Dict

from fastapi import HTTPException, status

from .utils import hash_password, verify_password


class CredentialStore:
    def __init__(self):
        self._hashes: Dict[str, str] = {}
        self._lock = threading.Lock()

    def set_password(self, username: str, password: str) -> None:
        with self._lock:
            self._hashes[username.strip().lower()] = hash_password(password)

    def rename(self, old_username: str, new_username: str) -> None:
        """Carry credentials over when a user changes their username."""
        with self._lock:
            stored = self._hashes.pop(old_username.strip().lower(), None)
            if stored is not None:
                self._hashes[new_username.strip().lower()] = stored

    def authenticate(self, username: str, password: str) -> str:
        """
        Validate a username/password pair.

        Returns:
            str: The authenticated (lowercased) username.

        Raises:
            HTTPException: If authentication fails (401 Unauthorized).
        """
        key = username.strip().lower()
        stored = self._hashes.get(key)

        if stored is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
                headers={"WWW-Authenticate": "Basic"},
            )

        if verify_password(password, stored):
            return key

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password",
            headers={"WWW-Authenticate": "Basic"},
        )
