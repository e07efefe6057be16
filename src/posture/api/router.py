"""Master API router mounted at /api."""

from fastapi import APIRouter

from posture.api.routes import (
    admin,
    applications,
    auth,
    dashboard,
    findings,
    health,
    risk_assessments,
    standings,
)

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router)
api_router.include_router(applications.router)
api_router.include_router(findings.router)
api_router.include_router(standings.router)
api_router.include_router(risk_assessments.router)
api_router.include_router(dashboard.router)
api_router.include_router(admin.router)
