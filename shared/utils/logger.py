"""
Logging utilities for the EarthLord client

Provides centralized logging configuration and utilities.
"""

import os
import copy
import logging
import logging.config
from typing import Optional, Dict, Any
import yaml
from pathlib import Path

# Default logging configuration
DEFAULT_LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
        'detailed': {
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(lineno)d - %(message)s',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        },
        'json': {
            'format': '{"timestamp": "%(asctime)s", "logger": "%(name)s", "level": "%(levelname)s", "module": "%(module)s", "function": "%(funcName)s", "line": %(lineno)d, "message": "%(message)s"}',
            'datefmt': '%Y-%m-%d %H:%M:%S'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'default',
            'stream': 'ext://sys.stdout'
        }
    },
    'loggers': {
        'root': {
            'level': 'INFO',
            'handlers': ['console'],
            'propagate': False
        },
        'earthlord': {
            'level': 'INFO',
            'handlers': ['console'],
            'propagate': False
        }
    }
}


def _load_config_file(config_path: str) -> Optional[Dict[str, Any]]:
    """Read a YAML logging configuration, None when unreadable"""
    try:
        with open(config_path, 'r') as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logging.getLogger(__name__).warning(f"Failed to load logging config from {config_path}: {e}")
        return None


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    log_format: Optional[str] = None
) -> Dict[str, Any]:
    """
    Setup logging configuration

    Args:
        config_path: Path to a YAML logging configuration file
        log_level: Override log level
        log_format: Override log format ('default', 'detailed', 'json')

    Returns:
        dict: The configuration that was applied
    """
    config = None

    if config_path and os.path.exists(config_path):
        config = _load_config_file(config_path)

    # Try the configs directory shipped next to the shared package
    if not config:
        shared_config_path = Path(__file__).parent.parent / "configs" / "logging.yml"
        if shared_config_path.exists():
            config = _load_config_file(str(shared_config_path))

    if not config:
        config = copy.deepcopy(DEFAULT_LOGGING_CONFIG)

    # Apply environment-specific overrides
    environment = os.getenv('ENVIRONMENT', 'development')
    if environment in config:
        env_config = config.pop(environment)

        if 'handlers' in env_config:
            config['handlers'].update(env_config['handlers'])

        if 'loggers' in env_config:
            config['loggers'].update(env_config['loggers'])

    # Drop any other environment sections, dictConfig rejects unknown keys
    for section in ('development', 'testing', 'staging', 'production'):
        config.pop(section, None)

    if log_level:
        log_level = log_level.upper()
        for logger_config in config['loggers'].values():
            logger_config['level'] = log_level
        for handler_config in config['handlers'].values():
            handler_config['level'] = log_level

    if log_format and log_format in config['formatters']:
        for handler_config in config['handlers'].values():
            handler_config['formatter'] = log_format

    try:
        logging.config.dictConfig(config)
        logging.getLogger(__name__).debug(f"Logging configured for environment: {environment}")
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        # Fallback to basic configuration
        logging.basicConfig(
            level=getattr(logging, log_level or 'INFO', logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        logging.getLogger(__name__).warning(f"Failed to configure logging, using basic config: {e}")

    return config


class AuditLogger:
    """Logger for account events (sign-in, sign-out, deletion)"""

    def __init__(self, name: str = "earthlord.audit"):
        self.logger = logging.getLogger(name)

    def log_auth_event(
        self,
        action: str,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """Log an account action for the audit trail"""
        who = user_id or email or "anonymous"
        self.logger.info(
            f"User {who} performed {action}",
            extra={
                'user_id': user_id,
                'email': email,
                'action': action,
                'details': details or {},
                'event_type': 'auth_action'
            }
        )


def get_audit_logger() -> AuditLogger:
    """Get audit logger instance"""
    return AuditLogger()


def init_logging():
    """Initialize logging with environment variables"""
    config_path = os.getenv('LOGGING_CONFIG_PATH')
    log_level = os.getenv('LOG_LEVEL', 'INFO')
    log_format = os.getenv('LOG_FORMAT', 'default')

    return setup_logging(config_path, log_level, log_format)
