"""Supported languages route."""

from fastapi import APIRouter

from code_quality_checker.utils import SUPPORTED_LANGUAGES

from ..schemas import LanguagesResponse

router = APIRouter(prefix="/api")


@router.get("/supported-languages", response_model=LanguagesResponse)
def supported_languages() -> LanguagesResponse:
    return LanguagesResponse(languages=list(SUPPORTED_LANGUAGES))
