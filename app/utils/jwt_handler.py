# jwt_handler.py
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from app.config import settings
from app.schemas.auth import TokenData

DEFAULT_TOKEN_TTL = timedelta(minutes=30)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_student_token(student_id: int, expires_delta: timedelta | None = None) -> str:
    """Sign a token for one student. Accounts live in another service, so only scripts and tests call this."""
    if expires_delta is None:
        expires_delta = DEFAULT_TOKEN_TTL
    claims = {"sub": str(student_id), "exp": datetime.now(timezone.utc) + expires_delta}
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_student_token(token: str) -> TokenData:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise _unauthorized("Token expired") from exc
    except JWTError as exc:
        raise _unauthorized("Invalid token") from exc

    subject = payload.get("sub")
    if subject is None:
        raise _unauthorized("Invalid token payload")
    try:
        return TokenData(student_id=int(subject))
    except (TypeError, ValueError) as exc:
        raise _unauthorized("Invalid token subject") from exc
