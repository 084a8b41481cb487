from core.database import SessionLocal
from typing import Annotated
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from core.config import settings
from core.exceptions import AuthenticationRequired
from core.policy import Identity
from utils.logger import get_logger

logger = get_logger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


bearer_scheme = HTTPBearer(auto_error=False)


def decode_identity(token: str) -> Identity:
    """
    Verify a token from the auth provider and turn it into an Identity.

    The provider puts the stable user id in `sub` and the address in `email`.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.TOKEN_AUDIENCE,
            options={"verify_aud": settings.TOKEN_AUDIENCE is not None}
        )
    except JWTError as exc:
        logger.warning("Rejected bearer token", extra={"error": str(exc)})
        raise AuthenticationRequired("Could not validate credentials.")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationRequired("Could not validate credentials.")

    return Identity(user_id=str(user_id), email=payload.get("email"))


def get_optional_identity(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]
) -> Identity | None:
    """
    Anonymous callers get None. An Authorization header that is present
    but unusable (bad token, or not a Bearer scheme at all) is a 401.
    """
    if credentials is None:
        if request.headers.get("Authorization"):
            raise AuthenticationRequired("Could not validate credentials.")
        return None
    return decode_identity(credentials.credentials)


def get_identity(identity: Annotated[Identity | None, Depends(get_optional_identity)]) -> Identity:
    if identity is None:
        raise AuthenticationRequired()
    return identity


identity_dependency = Annotated[Identity, Depends(get_identity)]
optional_identity_dependency = Annotated[Identity | None, Depends(get_optional_identity)]
