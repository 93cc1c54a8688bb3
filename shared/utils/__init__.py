"""
Shared utilities for the EarthLord client

This package contains common utilities used across the client services.
"""

from .logger import setup_logging, init_logging, AuditLogger, get_audit_logger

__all__ = [
    "setup_logging",
    "init_logging",
    "AuditLogger",
    "get_audit_logger",
]

__version__ = "1.0.0"
