from typing import List

from fastapi import APIRouter

from onlinejudge.sandbox.languages import language_names
from onlinejudge.schemas.language import LanguageInfo

router = APIRouter()


@router.get("/", response_model=List[LanguageInfo])
async def read_languages():
    return [LanguageInfo(id=lang_id, name=name) for lang_id, name in language_names().items()]
