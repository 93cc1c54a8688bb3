"""
Shared data schemas for the EarthLord client

This package contains common data schemas used across the client services.
"""

from .auth import (
    AuthFlowType,
    LanguageOption,
    EmailOTPRequestSchema,
    OTPVerifySchema,
    PasswordSetSchema,
    SignInSchema,
    IdTokenSignInSchema,
    UserMetadataUpdateSchema,
    LanguagePreferenceSchema,
    UserResponseSchema,
    AuthStateResponseSchema,
    DeleteAccountResponseSchema,
)

__all__ = [
    "AuthFlowType",
    "LanguageOption",
    "EmailOTPRequestSchema",
    "OTPVerifySchema",
    "PasswordSetSchema",
    "SignInSchema",
    "IdTokenSignInSchema",
    "UserMetadataUpdateSchema",
    "LanguagePreferenceSchema",
    "UserResponseSchema",
    "AuthStateResponseSchema",
    "DeleteAccountResponseSchema",
]

__version__ = "1.0.0"
