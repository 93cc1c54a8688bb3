"""
Auth Manager
Coordinates the registration, login, password reset, sign-out and account
deletion flows over the Supabase auth API.

Flows:
- Register: send OTP -> verify OTP (signed in, no password yet) -> set password -> authenticated
- Login: email + password -> authenticated
- Reset password: send OTP -> verify OTP (signed in) -> set new password -> authenticated

A verified OTP already yields a backend session, but ``is_authenticated``
stays false until the password step of the active flow has succeeded.

All state lives in one ``AuthState`` value that only changes through
``earthlord.models.auth_state.reduce`` on the event loop thread.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from shared.schemas.auth import AuthFlowType
from shared.utils.logger import AuditLogger, get_audit_logger
from earthlord.config import GoogleConfig, SupabaseConfig
from earthlord.models.auth_state import (
    INITIAL_STATE,
    Action,
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
    SIGNED_OUT,
    reduce,
)
from earthlord.models.user import Session, User
from earthlord.services.error_messages import parse_auth_error
from earthlord.services.localization import DEFAULT_LANGUAGE, translate
from earthlord.utils.edge_functions import EdgeFunctionClient
from earthlord.utils.google_identity import GoogleIdentityError, verify_google_id_token
from earthlord.utils.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

StateListener = Callable[[AuthState], None]


class AuthResponseError(Exception):
    """Raised when the backend reports success but returns no user"""


class AuthManager:
    """Auth flow coordinator and session listener"""

    def __init__(
        self,
        supabase: SupabaseClient,
        functions: EdgeFunctionClient,
        google_config: GoogleConfig,
        supabase_config: SupabaseConfig,
        language_provider: Callable[[], str] = lambda: DEFAULT_LANGUAGE,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._supabase = supabase
        self._functions = functions
        self._google_config = google_config
        self._supabase_config = supabase_config
        self._language_provider = language_provider
        self._audit = audit_logger or get_audit_logger()

        self._state: AuthState = INITIAL_STATE
        self._session: Optional[Session] = None
        self._listeners: List[StateListener] = []

        self._events: Optional[asyncio.Queue] = None
        self._listener_task: Optional[asyncio.Task] = None
        self._subscription = None

    # ==================== State ====================

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def session(self) -> Optional[Session]:
        """Session cached for the process lifetime"""
        return self._session

    @property
    def language(self) -> str:
        return self._language_provider()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback for every state change; returns an unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> AuthState:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state != previous:
            for listener in list(self._listeners):
                listener(self._state)
        return self._state

    def _error_message(self, error: BaseException) -> str:
        if isinstance(error, GoogleIdentityError):
            return translate(error.code, self.language)
        return parse_auth_error(error, self.language)

    @property
    def _auth(self):
        return self._supabase.get_client().auth

    async def _perform(self, description: str, call: Callable[[], Awaitable[Any]]) -> Tuple[bool, Any]:
        """
        Run one backend call between OperationStarted and a failure action

        Returns:
            (succeeded, result); on failure the mapped message is already in state
        """
        self.dispatch(OperationStarted())
        try:
            result = await call()
        except Exception as e:
            logger.error(f"{description} failed: {e}")
            self.dispatch(OperationFailed(self._error_message(e)))
            return False, None
        return True, result

    def _remember_session(self, session) -> Optional[Session]:
        if session is None:
            return None
        self._session = Session.from_supabase(session)
        return self._session

    @staticmethod
    def _user_from_response(response) -> User:
        user = getattr(response, 'user', None)
        if user is None and getattr(response, 'session', None) is not None:
            user = response.session.user
        if user is None:
            raise AuthResponseError("Auth response contained no user")
        return User.from_supabase(user)

    # ==================== Session listener ====================

    async def start(self):
        """Subscribe to the backend's auth events and start the listener task"""
        if self._listener_task is not None:
            return

        loop = asyncio.get_running_loop()
        self._events = asyncio.Queue()

        def on_auth_state_change(event, session):
            # May be called off the loop thread; only hand the event over
            loop.call_soon_threadsafe(self._events.put_nowait, (str(event), session))

        self._subscription = self._auth.on_auth_state_change(on_auth_state_change)
        self._listener_task = loop.create_task(self._consume_auth_events())
        logger.info("Auth state listener started")

    async def close(self):
        """Stop listening; called on teardown"""
        if self._subscription is not None:
            try:
                self._subscription.unsubscribe()
            except Exception as e:
                logger.warning(f"Failed to unsubscribe from auth events: {e}")
            self._subscription = None

        if self._listener_task is not None:
            self._listener_task.cancel()
            try:
                await self._listener_task
            except asyncio.CancelledError:
                pass
            self._listener_task = None
            logger.info("Auth state listener stopped")

    async def _consume_auth_events(self):
        while True:
            event, session = await self._events.get()
            try:
                self.handle_auth_event(event, session)
            except Exception:
                logger.exception(f"Failed to apply auth event {event}")
            finally:
                self._events.task_done()

    def handle_auth_event(self, event: str, session=None):
        """Map one backend auth event onto state"""
        # Enum members stringify as 'AuthChangeEvent.SIGNED_IN'
        event = str(event).rsplit('.', 1)[-1]
        logger.info(f"Auth state change: {event}")

        if event == SIGNED_OUT:
            self._session = None
            self.dispatch(AuthEventReceived(event))
            return

        cached = self._remember_session(session)
        user = cached.user if cached else None
        self.dispatch(AuthEventReceived(event, user))

    # ==================== Registration ====================

    async def send_register_otp(self, email: str):
        """Send a sign-up code; the backend may create the user"""
        ok, _ = await self._perform(
            "Sending registration code",
            lambda: self._auth.sign_in_with_otp({
                "email": email,
                "options": {"should_create_user": True}
            })
        )
        if ok:
            self.dispatch(OTPSent(AuthFlowType.REGISTERING))
            logger.info(f"Registration code sent to: {email}")

    async def verify_register_otp(self, email: str, code: str):
        """
        Verify the sign-up code.

        The user is signed in afterwards but stays unauthenticated until
        complete_registration sets a password.
        """
        async def verify():
            response = await self._auth.verify_otp({"email": email, "token": code, "type": "email"})
            user = self._user_from_response(response)
            self._remember_session(getattr(response, 'session', None))
            return user

        ok, user = await self._perform("Verifying registration code", verify)
        if ok:
            self.dispatch(OTPVerified(user))
            logger.info(f"Registration code verified for user {user.id}, waiting for password")

    async def complete_registration(self, password: str):
        """Set the password that finishes registration"""
        async def set_password():
            response = await self._auth.update_user({"password": password})
            return self._user_from_response(response)

        ok, user = await self._perform("Setting registration password", set_password)
        if ok:
            self.dispatch(PasswordSet(user))
            self._audit.log_auth_event("register", user_id=user.id, email=user.email)

    # ==================== Login ====================

    async def sign_in(self, email: str, password: str):
        """Email and password sign-in"""
        async def sign_in():
            response = await self._auth.sign_in_with_password({"email": email, "password": password})
            user = self._user_from_response(response)
            self._remember_session(getattr(response, 'session', None))
            return user

        ok, user = await self._perform("Signing in", sign_in)
        if ok:
            self.dispatch(SignedIn(user))
            self._audit.log_auth_event("sign_in", user_id=user.id, email=user.email)

    async def sign_in_with_google(self, raw_id_token: str, nonce: Optional[str] = None):
        """Exchange a Google ID token for a backend session"""
        async def sign_in():
            identity = await asyncio.to_thread(verify_google_id_token, raw_id_token, self._google_config)
            credentials: Dict[str, Any] = {"provider": "google", "token": raw_id_token}
            if nonce:
                credentials["nonce"] = nonce
            response = await self._auth.sign_in_with_id_token(credentials)
            user = self._user_from_response(response)
            self._remember_session(getattr(response, 'session', None))
            logger.info(f"Google identity {identity.email} exchanged for user {user.id}")
            return user

        ok, user = await self._perform("Signing in with Google", sign_in)
        if ok:
            self.dispatch(SignedIn(user))
            self._audit.log_auth_event("sign_in_google", user_id=user.id, email=user.email)

    # ==================== Password reset ====================

    async def send_reset_otp(self, email: str):
        """Send a password recovery code"""
        ok, _ = await self._perform(
            "Sending password reset code",
            lambda: self._auth.reset_password_for_email(email)
        )
        if ok:
            self.dispatch(OTPSent(AuthFlowType.RESETTING_PASSWORD))
            logger.info(f"Password reset code sent to: {email}")

    async def verify_reset_otp(self, email: str, code: str):
        """Verify the recovery code; the OTP type is 'recovery', not 'email'"""
        async def verify():
            response = await self._auth.verify_otp({"email": email, "token": code, "type": "recovery"})
            user = self._user_from_response(response)
            self._remember_session(getattr(response, 'session', None))
            return user

        ok, user = await self._perform("Verifying password reset code", verify)
        if ok:
            self.dispatch(OTPVerified(user))
            logger.info(f"Password reset code verified for user {user.id}, waiting for new password")

    async def reset_password(self, new_password: str):
        """Set the new password that finishes the reset flow"""
        async def set_password():
            response = await self._auth.update_user({"password": new_password})
            return self._user_from_response(response)

        ok, user = await self._perform("Resetting password", set_password)
        if ok:
            self.dispatch(PasswordSet(user))
            self._audit.log_auth_event("password_reset", user_id=user.id, email=user.email)

    # ==================== Account ====================

    async def update_user_metadata(self, data: Dict[str, Any]):
        """Merge data into the user's metadata"""
        async def update():
            response = await self._auth.update_user({"data": data})
            return self._user_from_response(response)

        ok, user = await self._perform("Updating user metadata", update)
        if ok:
            self.dispatch(UserUpdated(user))

    async def sign_out(self):
        """Sign out; local state is cleared even if the backend call fails"""
        user = self._state.current_user
        self.dispatch(OperationStarted())
        try:
            await self._auth.sign_out()
        except Exception as e:
            logger.warning(f"Backend sign-out failed, clearing local state anyway: {e}")

        self._session = None
        self.dispatch(StateReset())
        self._audit.log_auth_event("sign_out", user_id=user.id if user else None)

    async def delete_account(self) -> bool:
        """
        Delete the account through the delete-account function, then sign out

        Returns:
            bool: True if the function reported success
        """
        user = self._state.current_user
        self.dispatch(OperationStarted())

        error_message = None
        session = self._session
        if session is None or session.is_expired():
            # get_session refreshes an expired token
            try:
                session = self._remember_session(await self._auth.get_session())
            except Exception as e:
                logger.warning(f"Could not load session for account deletion: {e}")
                session = None

        if session is None:
            error_message = translate("not_signed_in", self.language)
        else:
            try:
                await self._functions.invoke(
                    self._supabase_config.delete_account_function,
                    session.authorization_header
                )
                logger.info(f"Account deleted for user {session.user.id}")
            except Exception as e:
                logger.error(f"Deleting account failed: {e}")
                error_message = self._error_message(e)

        try:
            await self._auth.sign_out()
        except Exception as e:
            logger.warning(f"Sign-out after account deletion failed: {e}")

        self._session = None
        self.dispatch(StateReset(error_message=error_message))
        self._audit.log_auth_event(
            "delete_account",
            user_id=user.id if user else None,
            details={"success": error_message is None}
        )
        return error_message is None

    async def check_session(self):
        """Restore state from the stored session at startup"""
        self.dispatch(OperationStarted())
        try:
            session = await self._auth.get_session()
        except Exception as e:
            logger.info(f"No valid session: {e}")
            session = None

        cached = self._remember_session(session)
        if cached is None:
            self._session = None
            self.dispatch(StateReset())
            return

        self.dispatch(SessionRestored(cached.user))
        if cached.user.is_email_confirmed:
            logger.info(f"Session valid, user {cached.user.id} signed in")
        else:
            logger.warning(f"Session for user {cached.user.id} exists but email is not confirmed")

    # ==================== Helpers ====================

    def reset_state(self):
        """Clear every flag, the user and the error"""
        self._session = None
        self.dispatch(StateReset())

    def clear_error(self):
        self.dispatch(ErrorCleared())

    def reset_otp_state(self):
        """Allow a code to be sent again"""
        self.dispatch(OTPStateReset())
