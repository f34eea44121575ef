"""
Configuration for the auth module.

Demo accounts registered when the app starts (username -> password).
In production, credentials come from an identity provider instead.
"""

from typing import Dict
import os

DEMO_USERS: Dict[str, str] = {
    "linkbio_demo": os.getenv("DEMO_USER_PASSWORD", "linkbio_demo"),
    "linkbio_admin": os.getenv("ADMIN_USER_PASSWORD", "linkbio_admin"),
}

# Accounts allowed to trigger operational endpoints (monthly rollover).
ADMIN_USERNAMES = frozenset({"linkbio_admin"})
