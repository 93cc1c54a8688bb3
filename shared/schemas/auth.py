"""
Auth data schemas for the EarthLord client

Pydantic models for request validation and state serialization.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from enum import Enum


class AuthFlowType(str, Enum):
    """Multi-step flow currently in progress"""
    NONE = "none"
    REGISTERING = "registering"
    RESETTING_PASSWORD = "resetting_password"


class LanguageOption(str, Enum):
    """In-app language preference"""
    SYSTEM = "system"
    ZH_HANS = "zh-Hans"
    EN = "en"


class EmailOTPRequestSchema(BaseModel):
    """Schema for requesting a one-time passcode"""
    email: EmailStr

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Normalize email"""
        return v.lower()


class OTPVerifySchema(BaseModel):
    """Schema for verifying a one-time passcode"""
    email: EmailStr
    code: str = Field(..., min_length=4, max_length=10)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Normalize email"""
        return v.lower()

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        """Codes are numeric"""
        v = v.strip()
        if not v.isdigit():
            raise ValueError('Verification code must contain digits only')
        return v


class PasswordSetSchema(BaseModel):
    """Schema for setting a password after OTP verification"""
    password: str = Field(..., min_length=6, max_length=128)


class SignInSchema(BaseModel):
    """Schema for email and password sign-in"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        """Normalize email"""
        return v.lower()


class IdTokenSignInSchema(BaseModel):
    """Schema for federated sign-in with a Google ID token"""
    id_token: str = Field(..., min_length=1)
    nonce: Optional[str] = None


class UserMetadataUpdateSchema(BaseModel):
    """Schema for updating user metadata"""
    data: Dict[str, Any] = Field(..., min_length=1)


class LanguagePreferenceSchema(BaseModel):
    """Schema for changing the language preference"""
    language: LanguageOption


class UserResponseSchema(BaseModel):
    """Schema for the signed-in user"""
    id: str
    email: Optional[str] = None
    display_name: str
    avatar_url: Optional[str] = None
    email_confirmed_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)


class AuthStateResponseSchema(BaseModel):
    """Schema for the observable auth state snapshot"""
    is_authenticated: bool
    needs_password_setup: bool
    is_loading: bool
    otp_sent: bool
    otp_verified: bool
    flow: AuthFlowType
    error_message: Optional[str] = None
    current_user: Optional[UserResponseSchema] = None


class DeleteAccountResponseSchema(BaseModel):
    """Schema for the account deletion outcome"""
    success: bool
    state: AuthStateResponseSchema
