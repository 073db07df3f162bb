"""
Access-token verification.

Tokens are issued by the identity provider, never by this service. We only
verify the signature, expiry and audience, and read ``sub`` (profile id)
and ``email``. ``create_access_token`` mints compatible tokens for local
development and tests.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from jwt import PyJWTError

from .core.config import settings
from .core.exceptions import UnauthorizedException
from .principal import UserPrincipal

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _secret_value(secret_obj: Any) -> str:
    getter = getattr(secret_obj, "get_secret_value", None)
    if callable(getter):
        return cast(str, getter())
    return cast(str, secret_obj)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify an access token. Raises PyJWTError on any failure."""
    audience = settings.identity_jwt_audience
    options = {"require": ["exp", "sub"]}
    if not audience:
        options["verify_aud"] = False  # type: ignore[assignment]
    payload = jwt.decode(
        token,
        _secret_value(settings.identity_jwt_secret),
        algorithms=[settings.identity_jwt_algorithm],
        audience=audience or None,
        options=options,
    )
    return cast(Dict[str, Any], payload)


def create_access_token(
    user_id: str, email: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Mint a token shaped like the identity provider's."""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": user_id,
        "email": email,
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=1)),
        "role": "authenticated",
    }
    if settings.identity_jwt_audience:
        payload["aud"] = settings.identity_jwt_audience
    return jwt.encode(
        payload,
        _secret_value(settings.identity_jwt_secret),
        algorithm=settings.identity_jwt_algorithm,
    )


def principal_from_token(token: str) -> UserPrincipal:
    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.warning(f"JWT validation error: {str(e)}")
        raise UnauthorizedException("Could not validate credentials")

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        logger.warning("Token payload missing 'sub' field")
        raise UnauthorizedException("Could not validate credentials")
    email = payload.get("email")
    return UserPrincipal(user_id=user_id, email=email if isinstance(email, str) else "")


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> UserPrincipal:
    """
    Dependency returning the verified caller.

    Raises:
        HTTPException: 401 when the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Not authenticated").to_http_exception()
    try:
        return principal_from_token(credentials.credentials)
    except UnauthorizedException as exc:
        raise exc.to_http_exception()


def get_current_principal_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[UserPrincipal]:
    """Like ``get_current_principal`` but returns None for anonymous or invalid callers."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return principal_from_token(credentials.credentials)
    except UnauthorizedException:
        return None
