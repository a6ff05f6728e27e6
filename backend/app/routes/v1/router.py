"""API v1 router - aggregates all route modules."""

from fastapi import APIRouter

from app.routes.v1 import collaborations, projects, publications, researchers

api_router = APIRouter()

api_router.include_router(researchers.router, prefix="/researchers", tags=["researchers"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(publications.router, prefix="/publications", tags=["publications"])
api_router.include_router(collaborations.router, prefix="/collaborations", tags=["collaborations"])
