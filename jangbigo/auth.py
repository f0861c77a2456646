from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, status, Request
import jwt
from sqlalchemy.orm import Session

from . import crud, models
from .config import settings
from .database import get_db
from .errors import ValidationError
from .token import decode_access_token

logger = logging.getLogger(__name__)

# kakao_id is stored as a signed BIGINT
KAKAO_ID_MAX = 2**63 - 1


@lru_cache(maxsize=1)
def _kakao_jwks_client() -> jwt.PyJWKClient:
    return jwt.PyJWKClient(settings.KAKAO_JWKS_URL)


def decode_kakao_id_token(id_token: str) -> dict:
    """
    Returns the claims of a Kakao OpenID Connect ID token.

    The mobile client receives the token straight from Kakao, so by default
    the payload is only decoded. With ``KAKAO_VERIFY_ID_TOKEN`` enabled the
    signature is checked against Kakao's JWKS together with issuer and
    audience (the app key).
    """
    try:
        if settings.KAKAO_VERIFY_ID_TOKEN:
            signing_key = _kakao_jwks_client().get_signing_key_from_jwt(id_token)
            claims = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=["RS256"],
                audience=settings.KAKAO_APP_KEY,
                issuer=settings.KAKAO_ISSUER,
            )
        else:
            claims = jwt.decode(id_token, options={"verify_signature": False})
    except jwt.PyJWTError as exc:
        logger.info("rejected Kakao ID token: %s", exc)
        raise ValidationError.single("idToken", "Invalid token") from None

    sub = str(claims.get("sub", ""))
    if not (sub.isascii() and sub.isdigit()) or int(sub) > KAKAO_ID_MAX:
        raise ValidationError.single("idToken", "Invalid token")
    return claims


def get_bearer_token(request: Request) -> str | None:
    """Extract the token from the Authorization header"""
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:]
    return None


def get_current_user(
    request: Request, db: Session = Depends(get_db)
) -> models.User:
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        user_id = int(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise credentials_exception
    user = crud.get_user(db, user_id)
    if user is None:
        raise credentials_exception
    return user


def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    if user.role is not models.UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
