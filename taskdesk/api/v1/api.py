from fastapi import APIRouter

from taskdesk.api.v1.endpoints import audit, auth, comments, export, health, projects, tasks, users

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])

# Resource endpoints
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(comments.router, prefix="/comments", tags=["comments"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
