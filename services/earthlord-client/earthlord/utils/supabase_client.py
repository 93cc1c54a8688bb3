"""
Supabase Client Configuration
Async client wrapper for authentication and the connection check
"""

import logging
from enum import Enum
from typing import Optional, Dict, Any

from supabase import acreate_client, AsyncClient
from supabase.lib.client_options import AsyncClientOptions

from earthlord.config import SupabaseConfig

logger = logging.getLogger(__name__)


class SupabaseNotConfiguredError(RuntimeError):
    """Raised when SUPABASE_URL or SUPABASE_ANON_KEY is missing"""


class ConnectionStatus(str, Enum):
    CONNECTED = "connected"
    FAILED = "failed"


# A PostgREST error means the request reached the database
_REACHED_BACKEND_MARKERS = ("PGRST", "Could not find")
_UNREACHABLE_MARKERS = ("hostname", "URL", "ConnectError", "ConnectTimeout", "Could not connect", "Name or service not known")


def classify_connection_error(error: BaseException) -> ConnectionStatus:
    """Decide from the error of a deliberately failing query whether the backend answered"""
    error_text = f"{type(error).__name__}: {error!s} {error!r}"

    if any(marker in error_text for marker in _REACHED_BACKEND_MARKERS):
        return ConnectionStatus.CONNECTED
    if "relation" in error_text and "does not exist" in error_text:
        return ConnectionStatus.CONNECTED
    return ConnectionStatus.FAILED


def is_unreachable_error(error: BaseException) -> bool:
    """Host, URL or socket level failure"""
    error_text = f"{type(error).__name__}: {error!s}"
    return any(marker in error_text for marker in _UNREACHABLE_MARKERS)


class SupabaseClient:
    """Supabase client wrapper for authentication services"""

    def __init__(self, config: SupabaseConfig, storage=None):
        self.config = config
        self.storage = storage
        self.client: Optional[AsyncClient] = None

    async def start(self) -> AsyncClient:
        """
        Create the async client.
        Call this during app startup before the auth manager starts listening.
        """
        if self.client is not None:
            return self.client

        if not self.config.is_configured():
            raise SupabaseNotConfiguredError("Supabase credentials not found in environment")

        options = AsyncClientOptions(auto_refresh_token=True, persist_session=True)
        if self.storage is not None:
            options.storage = self.storage

        self.client = await acreate_client(self.config.supabase_url, self.config.supabase_anon_key, options=options)
        logger.info("Supabase client initialized successfully")
        return self.client

    async def stop(self):
        """Release the client; stored sessions stay in storage"""
        if self.client is not None:
            self.client = None
            logger.info("Supabase client released")
        if self.storage is not None and hasattr(self.storage, "close"):
            await self.storage.close()

    def get_client(self) -> AsyncClient:
        """Get Supabase client instance"""
        if self.client is None:
            raise SupabaseNotConfiguredError("Supabase client not available")
        return self.client

    def is_available(self) -> bool:
        """Check if Supabase is available and configured"""
        return self.client is not None

    async def check_connection(self) -> Dict[str, Any]:
        """
        Probe the backend by querying a table that does not exist

        Returns:
            dict: status ('connected' or 'failed') and the error detail
        """
        client = self.get_client()
        table = self.config.connection_check_table
        logger.info(f"Testing connection to {self.config.supabase_url} via table {table}")

        try:
            await client.table(table).select("*").execute()
        except Exception as e:
            status = classify_connection_error(e)
            if status == ConnectionStatus.CONNECTED:
                logger.info("Supabase connection OK (server responded)")
            elif is_unreachable_error(e):
                logger.error(f"Supabase unreachable, check the network and SUPABASE_URL: {e}")
            else:
                logger.error(f"Supabase connection failed with an unexpected error: {e}")
            return {
                "status": status.value,
                "url": self.config.supabase_url,
                "detail": str(e) or type(e).__name__
            }

        logger.warning(f"Query on {table} unexpectedly succeeded")
        return {
            "status": ConnectionStatus.CONNECTED.value,
            "url": self.config.supabase_url,
            "detail": "query succeeded"
        }
