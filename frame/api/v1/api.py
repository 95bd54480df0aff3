from fastapi import APIRouter
from frame.api.v1.endpoints import (
    auth, health, users, organization, invitations,
    projects, time, time_entries, planning, rates, reports, export
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(organization.router, prefix="/organization", tags=["organization"])
api_router.include_router(invitations.router, prefix="/invitations", tags=["invitations"])

# Resource endpoints
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(time.router, prefix="/time", tags=["time"])
api_router.include_router(time_entries.router, prefix="/time-entries", tags=["time"])
api_router.include_router(planning.router, prefix="/planning", tags=["planning"])
api_router.include_router(rates.router, prefix="/rates", tags=["rates"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
