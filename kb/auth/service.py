
import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from kb.errors import Conflict, NotFound, Unauthenticated, ValidationError
from kb.models.user import User
from kb.utils.security import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

def normalize_email(email: str) -> str:
    return (email or "").strip().lower()

def register_user(db: Session, email: str, password: str) -> User:
    email = normalize_email(email)
    if "@" not in email:
        raise ValidationError("Invalid email address")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if db.scalar(select(User).where(User.email == email)):
        raise Conflict("Email already registered")

    user = User(email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email already registered")
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return user

def authenticate_user(db: Session, email: str, password: str) -> User:
    user = db.scalar(select(User).where(User.email == normalize_email(email)))
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise Unauthenticated("Invalid email or password")
    return user

def issue_token(user: User) -> str:
    return create_access_token(user.id, user.email)

def get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user
