"""
FastAPI dependency functions for authentication.

These can be used in routes with Depends() to protect endpoints.
The app factory stores its CredentialStore on `app.state.credentials`.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

# HTTP Basic authentication scheme
security = HTTPBasic()


def get_current_user(request: Request, credentials: HTTPBasicCredentials = Depends(security)) -> str:
    """
    Dependency that retrieves and validates the current user.

    Returns:
        str: The authenticated username.
    """
    return request.app.state.credentials.authenticate(credentials.username, credentials.password)
