from pydantic import BaseModel


class LanguageInfo(BaseModel):
    id: int
    name: str
