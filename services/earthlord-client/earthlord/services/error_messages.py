"""
Auth Error Messages
Maps backend error text to localized, user-facing messages
"""

from typing import Optional, Tuple

from earthlord.services.localization import DEFAULT_LANGUAGE, translate

# Checked in order, first match wins
ERROR_PATTERNS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("Invalid login credentials",), "invalid_credentials"),
    (("Email not confirmed",), "email_not_confirmed"),
    (("User already registered",), "already_registered"),
    (("Invalid OTP", "Token has expired"), "invalid_otp"),
    (("Password should be at least",), "weak_password"),
    (("network", "NSURLErrorDomain", "ConnectError", "ConnectTimeout"), "network"),
    (("rate limit",), "rate_limited"),
)


def describe_error(error: BaseException) -> str:
    """Raw description of an error, never empty"""
    text = str(error).strip()
    return text or type(error).__name__


def match_error_key(error_text: str) -> Optional[str]:
    """Return the catalog key for the first pattern found in error_text"""
    for substrings, key in ERROR_PATTERNS:
        if any(substring in error_text for substring in substrings):
            return key
    return None


def parse_auth_error(error: BaseException, language: str = DEFAULT_LANGUAGE) -> str:
    """
    Turn a backend error into a user-facing message

    Args:
        error: Exception raised by the backend call
        language: Catalog language, 'zh-Hans' or 'en'

    Returns:
        str: Localized message, or the raw error description when nothing matches
    """
    # The type name is included so transport errors with empty text still match
    error_text = f"{type(error).__name__}: {error!s} {error!r}"
    key = match_error_key(error_text)
    if key is None:
        return describe_error(error)
    return translate(key, language)

