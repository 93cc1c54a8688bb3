"""
Shared helpers for route modules
"""

from shared.schemas.auth import AuthStateResponseSchema, UserResponseSchema
from earthlord.models.auth_state import AuthState
from earthlord.models.user import User
from earthlord.services.localization import translate


def user_to_schema(user: User, language: str) -> UserResponseSchema:
    return UserResponseSchema(
        id=user.id,
        email=user.email,
        display_name=user.display_name(translate("survivor", language)),
        avatar_url=user.avatar_url,
        email_confirmed_at=user.email_confirmed_at,
        metadata=dict(user.metadata),
    )


def state_to_schema(state: AuthState, language: str) -> AuthStateResponseSchema:
    """Serialize an auth state snapshot"""
    return AuthStateResponseSchema(
        is_authenticated=state.is_authenticated,
        needs_password_setup=state.needs_password_setup,
        is_loading=state.is_loading,
        otp_sent=state.otp_sent,
        otp_verified=state.otp_verified,
        flow=state.flow,
        error_message=state.error_message,
        current_user=user_to_schema(state.current_user, language) if state.current_user else None,
    )
