"""
Auth endpoints: register, login, profile, change-password.
"""
import logging

from fastapi import APIRouter, Depends

from app.db import get_db
from app.dependencies import get_current_user
from app.models import ChangePasswordIn, LoginIn, ProfileUpdate, RegisterIn, UserOut
from app.routes.envelope import envelope
from app.services import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register(body: RegisterIn, db=Depends(get_db)):
    user, token = auth_service.register(db, body)
    return envelope({"token": token, "user": UserOut.model_validate(user)}, "User registered successfully")


@router.post("/login")
def login(body: LoginIn, db=Depends(get_db)):
    user, token = auth_service.login(db, body)
    logger.info("[Auth] Login %s", user.id)
    return envelope({"token": token, "user": UserOut.model_validate(user)}, "Login successful")


@router.get("/profile")
def get_profile(user=Depends(get_current_user)):
    return envelope({"user": UserOut.model_validate(user)})


@router.put("/profile")
def update_profile(body: ProfileUpdate, user=Depends(get_current_user), db=Depends(get_db)):
    user = auth_service.update_profile(db, user, body)
    return envelope({"user": UserOut.model_validate(user)}, "Profile updated successfully")


@router.put("/change-password")
def change_password(body: ChangePasswordIn, user=Depends(get_current_user), db=Depends(get_db)):
    auth_service.change_password(db, user, body)
    return envelope(message="Password changed successfully")
