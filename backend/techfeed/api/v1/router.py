"""API v1 main router - aggregates all endpoint routers."""

from fastapi import APIRouter

from techfeed.api.v1 import articles, auth, cron, sources

api_router = APIRouter()

# Main endpoints
api_router.include_router(articles.router, prefix="/articles", tags=["articles"])
api_router.include_router(sources.router, prefix="/sources", tags=["sources"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
