"""
Main API module for Linkbio Platform.

Responsibilities:
    - Expose REST endpoints for managing a user's ordered links
    - Track link clicks and public profile views
    - Serve per-user and platform-wide analytics
    - Profile registration, lookup and partial updates

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - In-memory Storage by default; PostgreSQL via LINKBIO_STORAGE_BACKEND.
    - LinkbioService holds the business rules and returns tagged results;
      this module only maps them onto HTTP status codes.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, status
from pydantic import BaseModel

from auth.config import ADMIN_USERNAMES, DEMO_USERS
from auth.dependencies import get_current_user
from auth.schemas import RegisterRequest
from auth.service import CredentialStore
from linkbio_platform.errors import ErrorKind
from linkbio_platform.results import OperationResult
from linkbio_platform.service import LinkbioService
from linkbio_platform.storage.base import BaseStorage
from linkbio_platform.storage.storage_factory import get_storage


class LinkCreateRequest(BaseModel):
    """Request payload for adding a link. Presence is validated by the service."""
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None


class LinkUpdateRequest(BaseModel):
    """Partial link update; only fields present in the JSON body are applied."""
    title: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class ReorderRequest(BaseModel):
    link_ids: Any = None


class ClickRequest(BaseModel):
    username: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; only fields present in the JSON body are applied."""
    username: Optional[str] = None
    display_name: Optional[str] = None
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    theme: Optional[str] = None
    is_public: Optional[bool] = None


_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.PERSISTENCE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _unwrap(result: OperationResult) -> Any:
    """Return the result value or raise the HTTPException matching its error kind."""
    if result.success:
        return result.value
    raise HTTPException(status_code=_STATUS_BY_KIND[result.error_kind], detail=result.message)


def create_app(storage: Optional[BaseStorage] = None, seed_demo_users: bool = True) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage: backend to use; defaults to `get_storage()` (env-selected).
        seed_demo_users: register the accounts from `auth.config.DEMO_USERS`.

    Returns:
        FastAPI: A fully configured application instance with isolated state.
    """
    app = FastAPI(
        title="Linkbio Platform",
        description="Link-in-bio profiles with ordered links and engagement analytics",
        docs_url="/docs",
    )
    log = logging.getLogger("linkbio")

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage if storage is not None else get_storage()
    service = LinkbioService(storage)
    credentials = CredentialStore()
    app.state.service = service
    app.state.credentials = credentials

    log.info("Linkbio storage backend: %s", type(storage).__name__)

    if seed_demo_users:
        for username, password in DEMO_USERS.items():
            if _unwrap(service.check_username(username))["available"]:
                _unwrap(service.register_user(username, display_name=username))
            credentials.set_password(username, password)

    def current_user_id(username: str = Depends(get_current_user)) -> str:
        return _unwrap(service.resolve_user_id(username))

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}

    # ----------------------------------------------------------------
    # Links
    # ----------------------------------------------------------------
    @app.get("/api/links")
    def list_links(user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
        return {"success": True, "links": _unwrap(service.list_links(user_id))}

    @app.post("/api/links", status_code=status.HTTP_201_CREATED)
    def add_link(req: LinkCreateRequest, user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
        link = _unwrap(service.add_link(user_id, req.model_dump()))
        return {"success": True, "link": link}

    # Declared before /api/links/{link_id} so "reorder" is never taken for an id.
    @app.put("/api/links/reorder")
    def reorder_links(req: ReorderRequest, user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
        return {"success": True, "links": _unwrap(service.reorder_links(user_id, req.link_ids))}

    @app.put("/api/links/{link_id}")
    def update_link(
        link_id: str, req: LinkUpdateRequest, user_id: str = Depends(current_user_id)
    ) -> Dict[str, Any]:
        link = _unwrap(service.update_link(user_id, link_id, req.model_dump(exclude_unset=True)))
        return {"success": True, "link": link}

    @app.post("/api/links/{link_id}/toggle")
    def toggle_link(link_id: str, user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
        return {"success": True, "link": _unwrap(service.toggle_link(user_id, link_id))}

    @app.delete("/api/links/{link_id}")
    def delete_link(link_id: str, user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
        result = service.delete_link(user_id, link_id)
        _unwrap(result)
        return {"success": True, "message": result.message}

    @app.post("/api/links/{link_id}/click")
    def record_click(link_id: str, req: ClickRequest) -> Dict[str, Any]:
        """Public endpoint: counts one click for the link owned by `username`."""
        result = service.record_click(req.username, link_id)
        _unwrap(result)
        return {"success": True, "message": result.message}

    # ----------------------------------------------------------------
    # Analytics
    # ----------------------------------------------------------------
    @app.get("/api/analytics/platform-stats")
    def platform_stats() -> Dict[str, Any]:
        return {"success": True, "stats": _unwrap(service.get_platform_stats())}

    @app.get("/api/analytics/user-stats")
    def user_stats(user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
        return {"success": True, "analytics": _unwrap(service.get_user_stats(user_id))}

    @app.get("/api/analytics/link-performance/{link_id}")
    def link_performance(link_id: str, user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
        return {"success": True, "performance": _unwrap(service.get_link_performance(user_id, link_id))}

    @app.post("/api/analytics/reset-monthly")
    def reset_monthly(username: str = Depends(get_current_user)) -> Dict[str, Any]:
        """Monthly rollover hook for an external scheduler (admin accounts only)."""
        if username not in ADMIN_USERNAMES:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin only")
        return {"success": True, **_unwrap(service.reset_monthly_counters())}

    # ----------------------------------------------------------------
    # Users
    # ----------------------------------------------------------------
    @app.post("/api/users/register", status_code=status.HTTP_201_CREATED)
    def register(req: RegisterRequest) -> Dict[str, Any]:
        user = _unwrap(service.register_user(req.username, req.email, req.display_name))
        credentials.set_password(user["username"], req.password)
        return {"success": True, "user": user}

    @app.get("/api/users/check-username")
    def check_username(username: str = Query("", description="Username to check.")) -> Dict[str, Any]:
        return {"success": True, **_unwrap(service.check_username(username))}

    @app.get("/api/users/profile")
    def get_profile(user_id: str = Depends(current_user_id)) -> Dict[str, Any]:
        return {"success": True, "user": _unwrap(service.get_profile(user_id))}

    @app.put("/api/users/profile")
    def update_profile(req: ProfileUpdateRequest, username: str = Depends(get_current_user)) -> Dict[str, Any]:
        user_id = _unwrap(service.resolve_user_id(username))
        user = _unwrap(service.update_profile(user_id, req.model_dump(exclude_unset=True)))
        if user["username"] != username:
            credentials.rename(username, user["username"])
        return {"success": True, "user": user}

    @app.get("/api/users/public/{username}")
    def public_profile(username: str) -> Dict[str, Any]:
        return {"success": True, "user": _unwrap(service.get_public_profile(username))}

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
