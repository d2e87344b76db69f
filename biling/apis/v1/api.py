# biling/apis/v1/api.py
from fastapi import APIRouter
from .endpoints import posts, users
from biling import schemas
from biling.core.config import settings

error_responses = {
    code: {"model": schemas.ErrorResponse}
    for code in (400, 401, 403, 404, 502)
}

api_router = APIRouter(responses=error_responses)

api_router.include_router(posts.router, prefix=settings.API_V1_STR + "/posts", tags=["posts"])
api_router.include_router(users.router, prefix=settings.API_V1_STR + "/users", tags=["users"])
