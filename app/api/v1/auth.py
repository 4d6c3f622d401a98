from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from app.api.v1.schemas import Credentials, TokenResponse
from app.db.session import get_db
from app.models.user import User
from app.security.auth.jwt_handler import get_jwt_handler
from app.security.auth.passwords import hash_password, verify_password
from app.utils.logger import get_logger

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


def _duplicate_email() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT, detail="Email already registered"
    )


def _email_taken(db: Session, email: str) -> bool:
    return db.query(User).filter(User.email == email).first() is not None


@router.post(
    "/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED
)
def register(body: Credentials, db: Session = Depends(get_db)) -> TokenResponse:
    """Create an account and return a bearer token for it."""
    if _email_taken(db, body.email):
        raise _duplicate_email()

    user = User(email=body.email, password_hash=hash_password(body.password))
    db.add(user)
    try:
        db.commit()
    except sa_exc.IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise _duplicate_email()
    db.refresh(user)
    logger.info("User registered", user_id=user.id)
    return TokenResponse(token=get_jwt_handler().create_token(str(user.id)))


@router.post("/login", response_model=TokenResponse)
def login(body: Credentials, db: Session = Depends(get_db)) -> TokenResponse:
    user = db.query(User).filter(User.email == body.email).first()
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Login rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )
    return TokenResponse(token=get_jwt_handler().create_token(str(user.id)))
