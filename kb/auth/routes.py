
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from kb.auth.deps import get_db, get_current_user
from kb.config import settings
from kb.models.user import User
from kb.schemas.auth import RegisterIn, LoginIn, UserOut, MeOut
from kb.schemas.note import SuccessOut
from kb.auth.service import register_user, authenticate_user, issue_token, get_user

router = APIRouter(prefix="/auth", tags=["auth"])

def set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
        max_age=settings.access_token_expire_minutes * 60,
    )

@router.post("/register", response_model=UserOut, status_code=201)
def register(body: RegisterIn, db: Session = Depends(get_db), response: Response = None):
    user = register_user(db, body.email, body.password)
    set_auth_cookie(response, issue_token(user))
    return user

@router.post("/login", response_model=UserOut)
def login(body: LoginIn, db: Session = Depends(get_db), response: Response = None):
    user = authenticate_user(db, body.email, body.password)
    set_auth_cookie(response, issue_token(user))
    return user

@router.post("/logout", response_model=SuccessOut)
def logout(response: Response, user: User = Depends(get_current_user)):
    response.delete_cookie(settings.cookie_name, path="/")
    return SuccessOut()

@router.get("/me", response_model=MeOut)
def me(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return get_user(db, user.id)
