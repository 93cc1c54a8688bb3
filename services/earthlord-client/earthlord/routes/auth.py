"""
Authentication Routes
Registration, login, password reset, sign-out and account deletion

Every operation responds with the auth state after it ran. A failed backend
call is reported through ``error_message`` in that state, not as an HTTP error.
"""

from fastapi import APIRouter, status
import logging

from shared.schemas.auth import (
    AuthStateResponseSchema, DeleteAccountResponseSchema, EmailOTPRequestSchema,
    IdTokenSignInSchema, OTPVerifySchema, PasswordSetSchema, SignInSchema,
    UserMetadataUpdateSchema
)
from earthlord.routes.helpers import state_to_schema
from earthlord.services.auth_manager import AuthManager
from earthlord.utils.dependencies import AuthManagerDep

logger = logging.getLogger(__name__)

router = APIRouter()


def _snapshot(auth_manager: AuthManager) -> AuthStateResponseSchema:
    return state_to_schema(auth_manager.state, auth_manager.language)


@router.get("/state", response_model=AuthStateResponseSchema)
async def get_state(auth_manager: AuthManagerDep):
    """Current auth state"""
    return _snapshot(auth_manager)


# Registration

@router.post("/register/otp", response_model=AuthStateResponseSchema)
async def send_register_otp(request: EmailOTPRequestSchema, auth_manager: AuthManagerDep):
    """Send a registration code to the email"""
    await auth_manager.send_register_otp(request.email)
    return _snapshot(auth_manager)


@router.post("/register/verify", response_model=AuthStateResponseSchema)
async def verify_register_otp(request: OTPVerifySchema, auth_manager: AuthManagerDep):
    """Verify the registration code; a password must be set next"""
    await auth_manager.verify_register_otp(request.email, request.code)
    return _snapshot(auth_manager)


@router.post("/register/complete", response_model=AuthStateResponseSchema)
async def complete_registration(request: PasswordSetSchema, auth_manager: AuthManagerDep):
    """Set the account password and finish registration"""
    await auth_manager.complete_registration(request.password)
    return _snapshot(auth_manager)


# Login

@router.post("/login", response_model=AuthStateResponseSchema)
async def sign_in(request: SignInSchema, auth_manager: AuthManagerDep):
    """Email and password login"""
    await auth_manager.sign_in(request.email, request.password)
    return _snapshot(auth_manager)


@router.post("/login/google", response_model=AuthStateResponseSchema)
async def sign_in_with_google(request: IdTokenSignInSchema, auth_manager: AuthManagerDep):
    """Login with a Google ID token"""
    await auth_manager.sign_in_with_google(request.id_token, request.nonce)
    return _snapshot(auth_manager)


# Password reset

@router.post("/password-reset/otp", response_model=AuthStateResponseSchema)
async def send_reset_otp(request: EmailOTPRequestSchema, auth_manager: AuthManagerDep):
    """Send a password reset code"""
    await auth_manager.send_reset_otp(request.email)
    return _snapshot(auth_manager)


@router.post("/password-reset/verify", response_model=AuthStateResponseSchema)
async def verify_reset_otp(request: OTPVerifySchema, auth_manager: AuthManagerDep):
    """Verify the password reset code"""
    await auth_manager.verify_reset_otp(request.email, request.code)
    return _snapshot(auth_manager)


@router.post("/password-reset/complete", response_model=AuthStateResponseSchema)
async def reset_password(request: PasswordSetSchema, auth_manager: AuthManagerDep):
    """Set the new password"""
    await auth_manager.reset_password(request.password)
    return _snapshot(auth_manager)


# Session and account

@router.post("/session/check", response_model=AuthStateResponseSchema)
async def check_session(auth_manager: AuthManagerDep):
    """Restore state from the stored session"""
    await auth_manager.check_session()
    return _snapshot(auth_manager)


@router.post("/logout", response_model=AuthStateResponseSchema)
async def sign_out(auth_manager: AuthManagerDep):
    """Sign out"""
    await auth_manager.sign_out()
    return _snapshot(auth_manager)


@router.delete("/account", response_model=DeleteAccountResponseSchema, status_code=status.HTTP_200_OK)
async def delete_account(auth_manager: AuthManagerDep):
    """Delete the account and sign out"""
    success = await auth_manager.delete_account()
    return DeleteAccountResponseSchema(success=success, state=_snapshot(auth_manager))


@router.patch("/user/metadata", response_model=AuthStateResponseSchema)
async def update_user_metadata(request: UserMetadataUpdateSchema, auth_manager: AuthManagerDep):
    """Update user metadata such as username or avatar_url"""
    await auth_manager.update_user_metadata(request.data)
    return _snapshot(auth_manager)


@router.post("/error/clear", response_model=AuthStateResponseSchema)
async def clear_error(auth_manager: AuthManagerDep):
    auth_manager.clear_error()
    return _snapshot(auth_manager)


@router.post("/otp/reset", response_model=AuthStateResponseSchema)
async def reset_otp_state(auth_manager: AuthManagerDep):
    """Allow a new code to be requested"""
    auth_manager.reset_otp_state()
    return _snapshot(auth_manager)
