"""FastAPI dependencies for authentication, the triage pipeline and storage.

The JWTAuthMiddleware (registered in main.py) verifies the token and stores
the normalised user in `request.state.user`:

    {
        "user_id": str,
        "email":   str,
        "role":    str,   # e.g. "patient", "doctor", "admin"
    }
"""

from typing import Dict, Any, Optional

from fastapi import HTTPException, Request, status
import logging

from telecare.agents.triage_graph import TriagePipeline
from telecare.config.settings import settings
from telecare.services.consultation_service import (
    ConsultationService,
    get_consultation_service,
)

logger = logging.getLogger(__name__)


async def get_current_user(request: Request) -> Optional[Dict[str, Any]]:
    """Return the authenticated user attached by JWTAuthMiddleware.

    With authentication disabled there is no user and None is returned.

    Raises:
        HTTP 401 – if authentication is enabled and request.state.user is absent
    """
    user: Optional[Dict[str, Any]] = getattr(request.state, "user", None)

    if user is None and not settings.auth_enabled:
        return None

    if not user or not user.get("user_id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated. Provide a valid bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug("Authenticated user: %s role=%s", user.get("user_id"), user.get("role"))
    return user


def get_pipeline(request: Request) -> TriagePipeline:
    """The pipeline built once in the application lifespan."""
    pipeline: Optional[TriagePipeline] = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Triage pipeline not initialized",
        )
    return pipeline


def get_consultations() -> ConsultationService:
    return get_consultation_service()
