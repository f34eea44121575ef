"""
Pydantic schemas for request payloads in the auth module.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Schema for account registration."""
    username: str
    password: str = Field(min_length=6)
    email: str = ""
    display_name: Optional[str] = None
