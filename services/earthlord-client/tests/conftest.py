"""
Pytest fixtures for EarthLord client tests
"""

import pytest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from earthlord.config import GoogleConfig, SupabaseConfig
from earthlord.services.auth_manager import AuthManager


@pytest.fixture
def supabase_user():
    """Backend user as returned by the supabase auth client"""
    return SimpleNamespace(
        id="5b2f6c8e-0000-4000-8000-000000000001",
        email="survivor@example.com",
        user_metadata={"username": "wasteland_lord"},
        email_confirmed_at=datetime(2026, 1, 15, 8, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def unconfirmed_user():
    return SimpleNamespace(
        id="5b2f6c8e-0000-4000-8000-000000000002",
        email="newcomer@example.com",
        user_metadata={},
        email_confirmed_at=None,
    )


@pytest.fixture
def supabase_session(supabase_user):
    return SimpleNamespace(
        access_token="access-token-abc",
        refresh_token="refresh-token-xyz",
        expires_at=1893456000,
        user=supabase_user,
    )


@pytest.fixture
def mock_auth(supabase_user, supabase_session):
    """Mock of client.auth with every method the coordinator calls"""
    auth_response = SimpleNamespace(user=supabase_user, session=supabase_session)

    auth = MagicMock()
    auth.sign_in_with_otp = AsyncMock(return_value=SimpleNamespace(user=None, session=None))
    auth.verify_otp = AsyncMock(return_value=auth_response)
    auth.update_user = AsyncMock(return_value=SimpleNamespace(user=supabase_user))
    auth.sign_in_with_password = AsyncMock(return_value=auth_response)
    auth.sign_in_with_id_token = AsyncMock(return_value=auth_response)
    auth.reset_password_for_email = AsyncMock(return_value=None)
    auth.sign_out = AsyncMock(return_value=None)
    auth.get_session = AsyncMock(return_value=supabase_session)
    auth.on_auth_state_change = MagicMock(return_value=MagicMock())
    return auth


@pytest.fixture
def mock_supabase(mock_auth):
    supabase = MagicMock()
    supabase.get_client.return_value = SimpleNamespace(auth=mock_auth)
    supabase.is_available.return_value = True
    supabase.check_connection = AsyncMock(return_value={
        "status": "connected",
        "url": "https://earthlord-test.supabase.co",
        "detail": "Could not find the table 'public.non_existent_table' in the schema cache"
    })
    return supabase


@pytest.fixture
def mock_functions():
    functions = MagicMock()
    functions.invoke = AsyncMock(return_value={"success": True})
    return functions


@pytest.fixture
def supabase_config():
    return SupabaseConfig(
        supabase_url="https://earthlord-test.supabase.co",
        supabase_anon_key="test-anon-key",
    )


@pytest.fixture
def google_config():
    return GoogleConfig(google_client_id="earthlord-test.apps.googleusercontent.com")


@pytest.fixture
def audit_logger():
    return MagicMock()


@pytest.fixture
def auth_manager(mock_supabase, mock_functions, google_config, supabase_config, audit_logger):
    """Coordinator wired to mocked backend clients, English messages"""
    return AuthManager(
        mock_supabase,
        mock_functions,
        google_config,
        supabase_config,
        language_provider=lambda: "en",
        audit_logger=audit_logger,
    )
