"""
Configuration Management
Environment-based configuration for Supabase, Google identity, session storage and application settings
"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import logging

logger = logging.getLogger(__name__)


class SupabaseConfig(BaseSettings):
    """Supabase project configuration"""

    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Serverless functions
    functions_path: str = "/functions/v1"
    delete_account_function: str = "delete-account"

    # Connection check target, must not exist in the database
    connection_check_table: str = "non_existent_table"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", case_sensitive=False, extra="ignore")

    @field_validator('supabase_url')
    @classmethod
    def validate_supabase_url(cls, v):
        v = v.strip().rstrip('/')
        if v and not v.startswith(('http://', 'https://')):
            raise ValueError('SUPABASE_URL must be an http(s) URL')
        return v

    def is_configured(self) -> bool:
        """Check if the project URL and key are both present"""
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def functions_url(self) -> str:
        """Base URL of the project's serverless functions"""
        return f"{self.supabase_url}{self.functions_path}"

    def log_config(self):
        """Log configuration (without sensitive data)"""
        logger.info(f"Supabase URL: {self.supabase_url or '(not set)'}")
        logger.info(f"Anon key: {'Yes' if self.supabase_anon_key else 'No'}")
        logger.info(f"Delete account function: {self.delete_account_function}")


class GoogleConfig(BaseSettings):
    """Google Sign-In configuration"""

    google_client_id: Optional[str] = None
    # Reject tokens whose email Google has not verified
    google_require_verified_email: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", case_sensitive=False, extra="ignore")

    def is_configured(self) -> bool:
        return bool(self.google_client_id)

    def log_config(self):
        """Log configuration (without sensitive data)"""
        logger.info(f"Google Sign-In: {'Enabled' if self.is_configured() else 'Disabled'}")


class SessionStorageConfig(BaseSettings):
    """Where the Supabase client persists its session"""

    session_storage_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    session_key_prefix: str = "earthlord:auth"
    # Stored sessions expire after 30 days without a refresh
    session_ttl_seconds: int = 60 * 60 * 24 * 30

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", case_sensitive=False, extra="ignore")

    @field_validator('session_storage_backend')
    @classmethod
    def validate_backend(cls, v):
        v = v.lower()
        if v not in ('memory', 'redis'):
            raise ValueError("SESSION_STORAGE_BACKEND must be 'memory' or 'redis'")
        return v

    @field_validator('session_ttl_seconds')
    @classmethod
    def validate_ttl(cls, v):
        if v < 60:
            raise ValueError('Session TTL must be at least 60 seconds')
        return v

    def log_config(self):
        """Log configuration (without sensitive data)"""
        logger.info(f"Session storage: {self.session_storage_backend}")
        if self.session_storage_backend == 'redis':
            logger.info(f"Session key prefix: {self.session_key_prefix}, TTL: {self.session_ttl_seconds}s")


class AppConfig(BaseSettings):
    """Application Configuration"""

    service_name: str = "earthlord-client"
    service_version: str = "1.0.0"
    debug: bool = False

    host: str = "127.0.0.1"
    port: int = 8080

    # Language preference persistence
    preferences_path: str = "~/.earthlord/preferences.json"
    default_language: str = "system"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="APP_", case_sensitive=False, extra="ignore")


# Global configuration instances
_supabase_config: Optional[SupabaseConfig] = None
_google_config: Optional[GoogleConfig] = None
_storage_config: Optional[SessionStorageConfig] = None
_app_config: Optional[AppConfig] = None


def get_supabase_config() -> SupabaseConfig:
    """Get Supabase configuration instance"""
    global _supabase_config
    if _supabase_config is None:
        _supabase_config = SupabaseConfig()
    return _supabase_config


def get_google_config() -> GoogleConfig:
    """Get Google configuration instance"""
    global _google_config
    if _google_config is None:
        _google_config = GoogleConfig()
    return _google_config


def get_storage_config() -> SessionStorageConfig:
    """Get session storage configuration instance"""
    global _storage_config
    if _storage_config is None:
        _storage_config = SessionStorageConfig()
    return _storage_config


def get_app_config() -> AppConfig:
    """Get application configuration instance"""
    global _app_config
    if _app_config is None:
        _app_config = AppConfig()
    return _app_config


def validate_configuration() -> bool:
    """Validate and log all configuration settings"""
    supabase_config = get_supabase_config()
    supabase_config.log_config()
    get_google_config().log_config()
    get_storage_config().log_config()

    if not supabase_config.is_configured():
        logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set, auth operations are unavailable")
        return False

    logger.info("Configuration validation completed")
    return True
