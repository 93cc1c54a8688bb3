"""
FastAPI Dependencies
Access to the auth manager and preferences created in the app lifespan
"""

from fastapi import Depends, HTTPException, Request, status
from typing import Annotated
import logging

from earthlord.services.auth_manager import AuthManager
from earthlord.services.language_manager import LanguageManager
from earthlord.utils.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def get_auth_manager(request: Request) -> AuthManager:
    """
    Auth manager dependency

    Raises:
        HTTPException: 503 when the backend is not configured
    """
    auth_manager = getattr(request.app.state, "auth_manager", None)
    if auth_manager is None:
        logger.warning("Auth operation requested but Supabase is not configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication backend not configured"
        )
    return auth_manager


def get_language_manager(request: Request) -> LanguageManager:
    """Language preference dependency"""
    return request.app.state.language_manager


def get_supabase_client(request: Request) -> SupabaseClient:
    """Supabase wrapper dependency"""
    supabase = getattr(request.app.state, "supabase", None)
    if supabase is None or not supabase.is_available():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication backend not configured"
        )
    return supabase


# Type aliases for cleaner dependency injection
AuthManagerDep = Annotated[AuthManager, Depends(get_auth_manager)]
LanguageManagerDep = Annotated[LanguageManager, Depends(get_language_manager)]
SupabaseDep = Annotated[SupabaseClient, Depends(get_supabase_client)]
