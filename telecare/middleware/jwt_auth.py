"""JWT Authentication Middleware for the triage service.

Reads the token from an ``Authorization: Bearer`` header, falling back to the
``access_token`` cookie, verifies it with PyJWT and attaches the user to
``request.state.user`` for downstream use.

Verification key:
  - HS* algorithms → ``jwt_secret_key``
  - RS*/ES*/PS* algorithms → PEM public key at ``jwt_public_key_path``

Claims used:
  - userId (or id / sub) : user identifier
  - email                : user email (optional)
  - role                 : e.g. "patient", "doctor", "admin" (optional)
"""

import logging
from typing import Optional, Dict, Any

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from telecare.config.settings import settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Routes that bypass JWT authentication
# ---------------------------------------------------------------------------
_PUBLIC_PREFIXES = ("/health", "/docs", "/openapi.json", "/redoc", "/api/v1/symptoms")


def _is_public_route(path: str) -> bool:
    if path == "/":
        return True
    return any(path == p or path.startswith(p) for p in _PUBLIC_PREFIXES)


# ---------------------------------------------------------------------------
# Verification key
# ---------------------------------------------------------------------------


def _uses_public_key(algorithm: str) -> bool:
    return algorithm.upper().startswith(("RS", "ES", "PS"))


def _load_verification_key() -> Optional[str]:
    """Shared secret for HMAC algorithms, PEM public key for asymmetric ones."""
    if not _uses_public_key(settings.jwt_algorithm):
        return settings.jwt_secret_key or None

    if not settings.jwt_public_key_path:
        return None
    try:
        with open(settings.jwt_public_key_path, "r") as fh:
            return fh.read().strip()
    except FileNotFoundError:
        logger.warning(
            "JWT public key not found at '%s'. Set jwt_public_key_path in your .env file.",
            settings.jwt_public_key_path,
        )
        return None
    except OSError as exc:
        logger.error("Failed to load JWT public key: %s", exc)
        return None


# ---------------------------------------------------------------------------
# Token decoding helpers
# ---------------------------------------------------------------------------


def decode_jwt(token: str, key: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT.

    Returns the full payload dict, or None if the token is invalid / expired.
    """
    options = {"verify_aud": False, "verify_exp": True}
    kwargs: Dict[str, Any] = {}
    if settings.jwt_issuer:
        kwargs["issuer"] = settings.jwt_issuer

    try:
        payload: Dict[str, Any] = jwt.decode(
            token,
            key,
            algorithms=[settings.jwt_algorithm],
            options=options,
            **kwargs,
        )
        return payload
    except ExpiredSignatureError:
        logger.debug("JWT token has expired")
        return None
    except InvalidTokenError as exc:
        logger.debug("Invalid JWT token: %s", exc)
        return None


def _payload_to_user(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Map JWT payload claims → normalised user dict."""
    return {
        "user_id": str(payload.get("userId") or payload.get("id") or payload.get("sub") or ""),
        "email": payload.get("email", ""),
        "role": payload.get("role", ""),
    }


def _extract_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(settings.jwt_access_cookie_name)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class JWTAuthMiddleware(BaseHTTPMiddleware):
    """Starlette middleware that enforces JWT authentication.

    On every non-public request:
      1. Reads the bearer token (or access_token cookie).
      2. Verifies it with the configured key and algorithm.
      3. Returns HTTP 401 JSON when missing or invalid.
      4. On success, sets `request.state.user` for use by FastAPI dependencies.
    """

    @staticmethod
    def _unauthorized(detail: str) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"success": False, "message": detail, "error": "UNAUTHORIZED"},
        )

    async def dispatch(self, request: Request, call_next):
        # CORS preflight carries no credentials
        if request.method == "OPTIONS":
            return await call_next(request)

        if not settings.auth_enabled or _is_public_route(request.url.path):
            return await call_next(request)

        key = _load_verification_key()
        if not key:
            logger.error(
                "JWT verification key unavailable – cannot authenticate request to %s",
                request.url.path,
            )
            return JSONResponse(
                status_code=503,
                content={
                    "success": False,
                    "message": "Authentication service unavailable (key not configured).",
                    "error": "SERVICE_UNAVAILABLE",
                },
            )

        token = _extract_token(request)
        payload = decode_jwt(token, key) if token else None
        if not payload:
            logger.warning(
                "Unauthenticated request: %s %s", request.method, request.url.path
            )
            return self._unauthorized(
                "Authentication required. Provide a valid bearer token or access_token cookie."
            )

        request.state.user = _payload_to_user(payload)
        logger.debug("Authenticated user_id=%s", request.state.user["user_id"])
        return await call_next(request)
