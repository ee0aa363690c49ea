
import logging
from fastapi import Request, Depends
from sqlalchemy.orm import Session
from jose import JWTError
from kb.config import settings
from kb.db.session import SessionLocal
from kb.errors import Unauthenticated
from kb.utils.security import decode_token
from kb.models.user import User

logger = logging.getLogger(__name__)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_token(request: Request) -> str | None:
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return request.cookies.get(settings.cookie_name)

def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token = get_token(request)
    if not token:
        raise Unauthenticated()

    try:
        payload = decode_token(token)
    except JWTError:
        logger.info("Rejected invalid session token on %s", request.url.path)
        raise Unauthenticated("Invalid session")

    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid session")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated("Invalid session")

    return user
