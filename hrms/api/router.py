# hrms/api/router.py
from fastapi import APIRouter

from hrms.api.auth import router as auth_router
from hrms.modules.plans.router import router as plans_router
from hrms.modules.registration.router import router as registration_router
from hrms.modules.companies.router import router as companies_router
from hrms.modules.users.router import router as users_router
from hrms.modules.superadmin.router import router as superadmin_router

# Main API router, mounted under /api
api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(
    registration_router,
    prefix="/registration",
    tags=["Registration"]
)

api_router.include_router(
    plans_router,
    prefix="/plans",
    tags=["Plans"]
)

api_router.include_router(
    companies_router,
    prefix="/companies",
    tags=["Companies"]
)

api_router.include_router(
    users_router,
    prefix="/users",
    tags=["Users"]
)

# Approval queues, stats and audit log live at several top-level paths
api_router.include_router(
    superadmin_router,
    tags=["Superadmin"]
)


@api_router.get("/")
async def api_root():
    return {
        "message": "HRMS API",
        "status": "active",
        "docs": "/docs",
        "available_endpoints": {
            "authentication": "/api/auth",
            "registration": "/api/registration",
            "plans": "/api/plans",
            "companies": "/api/companies",
            "users": "/api/users",
            "orders": "/api/orders",
            "offline_requests": "/api/offline-requests",
            "subdomain_requests": "/api/admin/subdomain-requests",
            "stats": "/api/superadmin/stats",
            "audit_logs": "/api/audit-logs"
        }
    }
