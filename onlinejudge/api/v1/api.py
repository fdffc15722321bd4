from fastapi import APIRouter

from onlinejudge.api.v1.endpoints import languages, problems, submissions

api_router = APIRouter()
api_router.include_router(problems.router, prefix="/problems", tags=["problems"])
api_router.include_router(submissions.router, prefix="/submissions", tags=["submissions"])
api_router.include_router(languages.router, prefix="/languages", tags=["languages"])
