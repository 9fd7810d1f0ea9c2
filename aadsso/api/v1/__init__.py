from fastapi import APIRouter

from aadsso.api.v1 import sso

api_router = APIRouter()
api_router.include_router(sso.router, prefix="/sso", tags=["SSO"])
