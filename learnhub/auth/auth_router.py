import hashlib
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from learnhub.auth.auth_models import (
    SendCodeRequest, SendCodeResponse, TokenResponse, User, UserRole, VerifyCodeRequest
)
from learnhub.auth.auth_utils import create_access_token, get_current_user
from learnhub.auth.code_mailer import CodeMailer
from learnhub.auth.otp_store import OneTimeCodeStore
from learnhub.config import EXPOSE_DEV_CODE
from learnhub.dependencies import get_code_mailer, get_otp_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def user_id_for(email: str) -> str:
    """Stable id per email so enrollments survive logging in again"""
    digest = hashlib.sha256(email.strip().lower().encode()).hexdigest()
    return f"USR_{digest[:16].upper()}"


@router.post("/send-code", response_model=SendCodeResponse)
async def send_code(
    data: SendCodeRequest,
    otp_store: OneTimeCodeStore = Depends(get_otp_store),
    mailer: CodeMailer = Depends(get_code_mailer)
):
    """
    Issue a 6-digit login code and email it.

    The name and role given here are kept with the code for /verify.
    When the email cannot be sent, demo mode returns the code in `dev_code`.
    """
    issued = otp_store.issue(data.email, name=data.name, role=data.role)
    delivered = await run_in_threadpool(mailer.send_login_code, data.email, issued.code)
    logger.info("Issued login code for %s (emailed=%s)", data.email, delivered)

    if not delivered and not EXPOSE_DEV_CODE:
        raise HTTPException(status_code=502, detail="Could not send the verification code. Please try again.")

    return SendCodeResponse(
        success=True,
        expires_in_seconds=int(otp_store.ttl.total_seconds()),
        delivered=delivered,
        dev_code=None if delivered else issued.code
    )


@router.post("/verify", response_model=TokenResponse)
async def verify_code(
    data: VerifyCodeRequest,
    otp_store: OneTimeCodeStore = Depends(get_otp_store)
):
    """Exchange a valid code for a verified user and an access token"""
    issued = otp_store.verify(data.email, data.code)
    if issued is None:
        logger.info("Login code rejected for %s", data.email)
        raise HTTPException(status_code=400, detail="Verification failed. Invalid or expired code.")

    email = data.email.strip()
    user = User(
        id=user_id_for(email),
        name=(data.name or "").strip() or issued.name or email.split("@")[0],
        email=email,
        role=data.role or issued.role or UserRole.STUDENT,
        avatar=f"https://picsum.photos/seed/{email}/100/100",
        is_verified=True
    )
    return TokenResponse(access_token=create_access_token(user), user=user)


@router.get("/me", response_model=User)
async def get_me(user: User = Depends(get_current_user)):
    return user
