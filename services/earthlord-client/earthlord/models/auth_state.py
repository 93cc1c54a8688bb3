"""
Auth State
Immutable auth state snapshot and the reducer that applies actions to it.

Every change to the coordinator's state is expressed as an action and goes
through ``reduce``. Operations dispatch ``OperationStarted`` before calling
the backend and exactly one of a success action or ``OperationFailed`` after
it, so a failed call only ever touches ``is_loading`` and ``error_message``.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Union

from shared.schemas.auth import AuthFlowType
from earthlord.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthState:
    """Observable auth state"""
    is_authenticated: bool = False
    needs_password_setup: bool = False
    current_user: Optional[User] = None
    is_loading: bool = False
    error_message: Optional[str] = None
    otp_sent: bool = False
    otp_verified: bool = False
    flow: AuthFlowType = AuthFlowType.NONE

    @property
    def is_idle(self) -> bool:
        """No flow in progress and nobody signed in"""
        return (
            not self.is_authenticated
            and not self.needs_password_setup
            and self.current_user is None
            and not self.otp_sent
            and not self.otp_verified
            and self.flow == AuthFlowType.NONE
        )


INITIAL_STATE = AuthState()


# Actions

@dataclass(frozen=True)
class OperationStarted:
    pass


@dataclass(frozen=True)
class OperationFailed:
    message: str


@dataclass(frozen=True)
class OTPSent:
    flow: AuthFlowType


@dataclass(frozen=True)
class OTPVerified:
    user: User


@dataclass(frozen=True)
class PasswordSet:
    user: Optional[User] = None


@dataclass(frozen=True)
class SignedIn:
    user: User


@dataclass(frozen=True)
class UserUpdated:
    user: User


@dataclass(frozen=True)
class SessionRestored:
    user: User


@dataclass(frozen=True)
class AuthEventReceived:
    """An event from the backend's auth state stream"""
    event: str
    user: Optional[User] = None


@dataclass(frozen=True)
class StateReset:
    """Collapse to idle; an error message may survive the collapse"""
    error_message: Optional[str] = None


@dataclass(frozen=True)
class ErrorCleared:
    pass


@dataclass(frozen=True)
class OTPStateReset:
    pass


Action = Union[
    OperationStarted, OperationFailed, OTPSent, OTPVerified, PasswordSet,
    SignedIn, UserUpdated, SessionRestored, AuthEventReceived, StateReset,
    ErrorCleared, OTPStateReset,
]


# Backend auth events
INITIAL_SESSION = "INITIAL_SESSION"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"
PASSWORD_RECOVERY = "PASSWORD_RECOVERY"
MFA_CHALLENGE_VERIFIED = "MFA_CHALLENGE_VERIFIED"


def _reduce_auth_event(state: AuthState, action: AuthEventReceived) -> AuthState:
    event = action.event

    if event == INITIAL_SESSION:
        if action.user is None:
            logger.info("No initial session")
            return state
        authenticated = state.is_authenticated or not state.needs_password_setup
        return replace(state, current_user=action.user, is_authenticated=authenticated)

    if event == SIGNED_IN:
        if action.user is None:
            return state
        # Mid-flow sign-ins (OTP verification) wait for the password step
        pending = state.needs_password_setup or state.flow != AuthFlowType.NONE
        authenticated = state.is_authenticated or not pending
        return replace(state, current_user=action.user, is_authenticated=authenticated)

    if event == SIGNED_OUT:
        # Sign-out and account deletion reset state first; keep the error they reported
        if state.is_idle:
            return replace(INITIAL_STATE, error_message=state.error_message)
        return INITIAL_STATE

    if event in (TOKEN_REFRESHED, USER_UPDATED):
        if action.user is None:
            return state
        return replace(state, current_user=action.user)

    if event in (PASSWORD_RECOVERY, MFA_CHALLENGE_VERIFIED):
        logger.info(f"Auth event {event}, no state change")
        return state

    logger.warning(f"Unknown auth event: {event}")
    return state


def reduce(state: AuthState, action: Action) -> AuthState:
    """Return the state that results from applying action to state"""
    if isinstance(action, OperationStarted):
        return replace(state, is_loading=True, error_message=None)

    if isinstance(action, OperationFailed):
        return replace(state, is_loading=False, error_message=action.message)

    if isinstance(action, OTPSent):
        return replace(
            state,
            is_loading=False,
            otp_sent=True,
            otp_verified=False,
            flow=action.flow,
        )

    if isinstance(action, OTPVerified):
        return replace(
            state,
            is_loading=False,
            current_user=action.user,
            otp_verified=True,
            needs_password_setup=True,
            is_authenticated=False,
        )

    if isinstance(action, PasswordSet):
        return replace(
            state,
            is_loading=False,
            current_user=action.user or state.current_user,
            needs_password_setup=False,
            is_authenticated=True,
            flow=AuthFlowType.NONE,
        )

    if isinstance(action, SignedIn):
        return replace(
            state,
            is_loading=False,
            current_user=action.user,
            is_authenticated=True,
            needs_password_setup=False,
            otp_sent=False,
            otp_verified=False,
            flow=AuthFlowType.NONE,
        )

    if isinstance(action, UserUpdated):
        return replace(state, is_loading=False, current_user=action.user)

    if isinstance(action, SessionRestored):
        if action.user.is_email_confirmed:
            return replace(
                state,
                is_loading=False,
                current_user=action.user,
                is_authenticated=not state.needs_password_setup,
            )
        return replace(
            state,
            is_loading=False,
            current_user=action.user,
            is_authenticated=False,
            needs_password_setup=True,
        )

    if isinstance(action, AuthEventReceived):
        return _reduce_auth_event(state, action)

    if isinstance(action, StateReset):
        return replace(INITIAL_STATE, error_message=action.error_message)

    if isinstance(action, ErrorCleared):
        return replace(state, error_message=None)

    if isinstance(action, OTPStateReset):
        return replace(state, otp_sent=False, otp_verified=False)

    raise TypeError(f"Unsupported auth action: {action!r}")
