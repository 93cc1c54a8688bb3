"""
Auth state reducer tests
"""

import pytest
from dataclasses import replace
from datetime import datetime, timezone

from shared.schemas.auth import AuthFlowType
from earthlord.models.auth_state import (
    INITIAL_STATE,
    AuthEventReceived,
    AuthState,
    ErrorCleared,
    OTPSent,
    OTPStateReset,
    OTPVerified,
    OperationFailed,
    OperationStarted,
    PasswordSet,
    SessionRestored,
    SignedIn,
    StateReset,
    UserUpdated,
    reduce,
)
from earthlord.models.user import User


@pytest.fixture
def user():
    return User(
        id="user-1",
        email="survivor@example.com",
        metadata={"username": "wasteland_lord"},
        email_confirmed_at=datetime(2026, 1, 15, tzinfo=timezone.utc),
    )


def run(state, *actions):
    for action in actions:
        state = reduce(state, action)
    return state


class TestRegistrationFlow:
    def test_otp_sent_sets_flow(self):
        state = run(INITIAL_STATE, OperationStarted(), OTPSent(AuthFlowType.REGISTERING))
        assert state.otp_sent is True
        assert state.flow == AuthFlowType.REGISTERING
        assert state.is_loading is False
        assert state.is_authenticated is False

    def test_verified_otp_needs_password_not_authenticated(self, user):
        state = run(
            INITIAL_STATE,
            OTPSent(AuthFlowType.REGISTERING),
            OTPVerified(user),
        )
        assert state.otp_verified is True
        assert state.needs_password_setup is True
        assert state.is_authenticated is False
        assert state.current_user == user

    def test_password_set_completes_flow(self, user):
        state = run(
            INITIAL_STATE,
            OTPSent(AuthFlowType.REGISTERING),
            OTPVerified(user),
            PasswordSet(user),
        )
        assert state.is_authenticated is True
        assert state.needs_password_setup is False
        assert state.flow == AuthFlowType.NONE


class TestResetFlow:
    def test_reset_walks_same_states(self, user):
        sent = run(INITIAL_STATE, OTPSent(AuthFlowType.RESETTING_PASSWORD))
        assert sent.flow == AuthFlowType.RESETTING_PASSWORD

        verified = reduce(sent, OTPVerified(user))
        assert verified.needs_password_setup is True
        assert verified.is_authenticated is False

        done = reduce(verified, PasswordSet())
        assert done.is_authenticated is True
        assert done.current_user == user
        assert done.flow == AuthFlowType.NONE


class TestLogin:
    def test_sign_in_is_single_step(self, user):
        state = run(INITIAL_STATE, OperationStarted(), SignedIn(user))
        assert state.is_authenticated is True
        assert state.current_user == user
        assert state.is_loading is False


class TestFailures:
    def test_failure_only_touches_loading_and_error(self, user):
        before = run(INITIAL_STATE, OTPSent(AuthFlowType.REGISTERING), OTPVerified(user))
        after = run(before, OperationStarted(), OperationFailed("Invalid code"))

        assert after.error_message == "Invalid code"
        assert after.is_loading is False
        assert replace(after, error_message=None) == before

    def test_started_clears_previous_error(self):
        state = run(INITIAL_STATE, OperationFailed("boom"), OperationStarted())
        assert state.error_message is None
        assert state.is_loading is True

    def test_unknown_action_rejected(self):
        with pytest.raises(TypeError):
            reduce(INITIAL_STATE, object())


class TestReset:
    def test_state_reset_clears_everything(self, user):
        busy = run(INITIAL_STATE, OTPSent(AuthFlowType.REGISTERING), OTPVerified(user), OperationFailed("x"))
        state = reduce(busy, StateReset())
        assert state == INITIAL_STATE
        assert state.is_idle

    def test_state_reset_is_idempotent(self, user):
        once = run(INITIAL_STATE, SignedIn(user), StateReset())
        twice = reduce(once, StateReset())
        assert once == twice == INITIAL_STATE

    def test_state_reset_can_keep_error(self, user):
        state = run(INITIAL_STATE, SignedIn(user), StateReset(error_message="Failed to delete account"))
        assert state.is_idle
        assert state.error_message == "Failed to delete account"

    def test_clear_error_and_otp_reset(self):
        state = run(INITIAL_STATE, OTPSent(AuthFlowType.REGISTERING), OperationFailed("x"))
        state = reduce(state, ErrorCleared())
        assert state.error_message is None
        assert state.otp_sent is True

        state = reduce(state, OTPStateReset())
        assert state.otp_sent is False
        assert state.otp_verified is False
        assert state.flow == AuthFlowType.REGISTERING


class TestSessionRestored:
    def test_confirmed_email_authenticates(self, user):
        state = reduce(INITIAL_STATE, SessionRestored(user))
        assert state.is_authenticated is True

    def test_unconfirmed_email_needs_password(self):
        user = User(id="user-2", email="newcomer@example.com")
        state = reduce(INITIAL_STATE, SessionRestored(user))
        assert state.is_authenticated is False
        assert state.needs_password_setup is True

    def test_pending_password_blocks_authentication(self, user):
        pending = AuthState(needs_password_setup=True)
        state = reduce(pending, SessionRestored(user))
        assert state.is_authenticated is False


class TestAuthEvents:
    def test_initial_session_authenticates(self, user):
        state = reduce(INITIAL_STATE, AuthEventReceived("INITIAL_SESSION", user))
        assert state.is_authenticated is True
        assert state.current_user == user

    def test_initial_session_respects_pending_password(self, user):
        state = reduce(AuthState(needs_password_setup=True), AuthEventReceived("INITIAL_SESSION", user))
        assert state.is_authenticated is False
        assert state.current_user == user

    def test_initial_session_without_session(self):
        assert reduce(INITIAL_STATE, AuthEventReceived("INITIAL_SESSION")) == INITIAL_STATE

    def test_signed_in_during_flow_stays_unauthenticated(self, user):
        registering = reduce(INITIAL_STATE, OTPSent(AuthFlowType.REGISTERING))
        state = reduce(registering, AuthEventReceived("SIGNED_IN", user))
        assert state.is_authenticated is False
        assert state.current_user == user

    def test_signed_in_outside_flow_authenticates(self, user):
        state = reduce(INITIAL_STATE, AuthEventReceived("SIGNED_IN", user))
        assert state.is_authenticated is True

    def test_signed_out_resets(self, user):
        state = run(INITIAL_STATE, SignedIn(user), AuthEventReceived("SIGNED_OUT"))
        assert state == INITIAL_STATE

    def test_signed_out_after_reset_keeps_error(self, user):
        collapsed = run(INITIAL_STATE, SignedIn(user), StateReset(error_message="Internal error"))
        state = reduce(collapsed, AuthEventReceived("SIGNED_OUT"))
        assert state.is_idle
        assert state.error_message == "Internal error"

    def test_signed_out_mid_flow_drops_error(self, user):
        busy = run(INITIAL_STATE, OTPSent(AuthFlowType.REGISTERING), OTPVerified(user), OperationFailed("x"))
        assert reduce(busy, AuthEventReceived("SIGNED_OUT")) == INITIAL_STATE

    @pytest.mark.parametrize("event", ["TOKEN_REFRESHED", "USER_UPDATED"])
    def test_refresh_events_update_user(self, user, event):
        renamed = User(id=user.id, email=user.email, metadata={"username": "new_name"})
        state = run(INITIAL_STATE, SignedIn(user), AuthEventReceived(event, renamed))
        assert state.current_user.username == "new_name"
        assert state.is_authenticated is True

    @pytest.mark.parametrize("event", ["PASSWORD_RECOVERY", "MFA_CHALLENGE_VERIFIED", "SOMETHING_NEW"])
    def test_informational_events_change_nothing(self, user, event):
        before = reduce(INITIAL_STATE, OTPSent(AuthFlowType.RESETTING_PASSWORD))
        assert reduce(before, AuthEventReceived(event, user)) == before


class TestUserUpdated:
    def test_user_replaced(self, user):
        updated = User(id=user.id, email=user.email, metadata={"avatar_url": "https://cdn.example.com/a.png"})
        state = run(INITIAL_STATE, SignedIn(user), UserUpdated(updated))
        assert state.current_user.avatar_url == "https://cdn.example.com/a.png"


class TestSnapshotHashing:
    def test_user_with_metadata_is_hashable(self, user):
        same = User(id=user.id, email=user.email, metadata=dict(user.metadata),
                    email_confirmed_at=user.email_confirmed_at)
        assert hash(user) == hash(same)
        assert user == same

    def test_state_with_user_is_hashable(self, user):
        state = run(INITIAL_STATE, SignedIn(user))
        assert state in {state}
