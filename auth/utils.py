"""
Utility functions for the auth module.
"""

import hashlib
import hmac
import os
from typing import Optional


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    """
    Return "salt$digest" for the given password (salted SHA256).

    Note:
        This is only for demo purposes.
        In production, use a strong hashing library such as passlib[bcrypt].
    """
    salt = salt if salt is not None else os.urandom(16)
    digest = hashlib.sha256(salt + password.encode()).hexdigest()
    return f"{salt.hex()}${digest}"


def verify_password(password: str, stored: str) -> bool:
    salt_hex, _, digest = stored.partition("$")
    try:
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    expected = hash_password(password, salt).partition("$")[2]
    return hmac.compare_digest(expected, digest)
