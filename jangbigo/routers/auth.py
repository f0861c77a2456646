"""Kakao login and the current-user endpoint."""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import crud, models
from ..auth import decode_kakao_id_token, get_current_user
from ..database import get_db
from ..schemas import AuthOut, Envelope, KakaoLoginIn, UserOut, envelope
from ..token import create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/kakao-login",
    response_model=Envelope[AuthOut],
    responses={201: {"model": Envelope[AuthOut], "description": "User created"}},
)
def kakao_login(payload: KakaoLoginIn, response: Response, db: Session = Depends(get_db)):
    """Find or create the user behind a Kakao ID token and issue our JWT."""
    claims = decode_kakao_id_token(payload.id_token)
    kakao_id = int(claims["sub"])

    user, created = crud.find_or_create_kakao_user(
        db,
        kakao_id=kakao_id,
        email=claims.get("email") or None,
        name=claims.get("name") or None,
        nickname=claims.get("nickname") or None,
    )
    logger.info("kakao login for user %s (created=%s)", user.id, created)

    data = AuthOut(user=UserOut.model_validate(user), token=create_access_token(user))
    if created:
        response.status_code = status.HTTP_201_CREATED
        return envelope("User created successfully", data, status.HTTP_201_CREATED)
    return envelope("User authenticated successfully", data)


@router.get("/me", response_model=Envelope[UserOut])
def me(current_user: models.User = Depends(get_current_user)):
    return envelope("User retrieved successfully", UserOut.model_validate(current_user))
