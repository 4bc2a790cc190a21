# invoicer/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from invoicer.core.database import get_db
from invoicer.deps import get_current_user
from invoicer.models.user import User
from invoicer.schemas.auth import (
    LoginPayload,
    LoginResponse,
    SignupPayload,
    SignupResponse,
    UserRead,
    VerifyTwoFactorPayload,
)
from invoicer.services import auth_flow, credentials
from invoicer.sms.service import SmsService, get_sms_service

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupPayload, db: Session = Depends(get_db)):
    user = credentials.register(
        db,
        email=payload.email,
        password=payload.password,
        phone_number=payload.phone_number,
        name=payload.name,
    )
    return {"message": "User created successfully", "user_id": user.id}


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
def login(
    payload: LoginPayload,
    db: Session = Depends(get_db),
    sms: SmsService = Depends(get_sms_service),
):
    result = auth_flow.login(db, sms, email=payload.email, password=payload.password)
    if result.challenge_sent:
        return {
            "auth": False,
            "user_id": result.user_id,
            "challenge_token": result.challenge_token,
            "message": auth_flow.CHALLENGE_SENT_MESSAGE,
        }
    return {"auth": True, "token": result.token}


@router.post("/verify-2fa", response_model=LoginResponse, response_model_exclude_none=True)
def verify_two_factor(payload: VerifyTwoFactorPayload, db: Session = Depends(get_db)):
    token = auth_flow.verify_second_factor(
        db,
        user_id=payload.user_id,
        code=payload.code,
        challenge_token=payload.challenge_token,
    )
    return {"auth": True, "token": token}


@router.get("/auth/me", response_model=UserRead)
def me(user: User = Depends(get_current_user)):
    return user
