"""
Message catalog for user-facing strings
"""

from typing import Dict

DEFAULT_LANGUAGE = "zh-Hans"

MESSAGES: Dict[str, Dict[str, str]] = {
    "zh-Hans": {
        "invalid_credentials": "邮箱或密码错误",
        "email_not_confirmed": "邮箱未验证",
        "already_registered": "该邮箱已注册",
        "invalid_otp": "验证码无效或已过期",
        "weak_password": "密码长度至少为6位",
        "network": "网络连接失败，请检查网络",
        "rate_limited": "请求过于频繁，请稍后再试",
        "google_not_configured": "Google 登录尚未配置",
        "google_invalid_token": "Google 身份验证失败",
        "google_unverified_email": "Google 账号邮箱未验证",
        "not_signed_in": "当前未登录",
        "survivor": "幸存者",
        "language_system": "跟随系统",
    },
    "en": {
        "invalid_credentials": "Incorrect email or password",
        "email_not_confirmed": "Email address not verified",
        "already_registered": "This email is already registered",
        "invalid_otp": "The verification code is invalid or has expired",
        "weak_password": "Password must be at least 6 characters",
        "network": "Network connection failed, please check your network",
        "rate_limited": "Too many requests, please try again later",
        "google_not_configured": "Google sign-in is not configured",
        "google_invalid_token": "Google identity verification failed",
        "google_unverified_email": "Google account email is not verified",
        "not_signed_in": "Not signed in",
        "survivor": "Survivor",
        "language_system": "Follow system",
    },
}


def translate(key: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Look up key in the catalog for language, falling back to the default catalog"""
    catalog = MESSAGES.get(language) or MESSAGES[DEFAULT_LANGUAGE]
    if key in catalog:
        return catalog[key]
    return MESSAGES[DEFAULT_LANGUAGE].get(key, key)
