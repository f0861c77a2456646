# jangbigo/token.py
from datetime import datetime, timedelta, timezone
import jwt
from .config import settings

def create_access_token(user) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": str(user.id),
        "userId": user.id,
        "role": user.role.value,
        # Kakao ids overflow JS numbers
        "kakaoId": str(user.kakao_id) if user.kakao_id is not None else None,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str) -> dict:
    """Raises ``jwt.PyJWTError`` for a bad signature, expiry or malformed token."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM], options={"require": ["sub", "exp"]})
