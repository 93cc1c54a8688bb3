"""
Preference Routes
"""

from fastapi import APIRouter

from shared.schemas.auth import LanguagePreferenceSchema
from earthlord.utils.dependencies import LanguageManagerDep

router = APIRouter()


def _language_payload(language_manager) -> dict:
    return {
        "language": language_manager.selected_language.value,
        "display_name": language_manager.display_name(),
        "resolved_language": language_manager.current_language_code,
    }


@router.get("/language")
async def get_language(language_manager: LanguageManagerDep):
    """Selected language and the catalog it resolves to"""
    return _language_payload(language_manager)


@router.put("/language")
async def set_language(request: LanguagePreferenceSchema, language_manager: LanguageManagerDep):
    """Switch and persist the language"""
    language_manager.set_language(request.language)
    return _language_payload(language_manager)
