"""Module: api."""

# backend/medsguardian/api/v1/api.py
from fastapi import APIRouter

# Core operational routes (health/auth).
from medsguardian.api.v1.routes.health import router as health_router
from medsguardian.api.v1.routes.auth import router as auth_router

# Domain routes used by the patient and guardian screens.
from medsguardian.api.v1.routes.account import router as account_router
from medsguardian.api.v1.routes.medications import router as medications_router
from medsguardian.api.v1.routes.doses import router as doses_router
from medsguardian.api.v1.routes.sync import router as sync_router


api_router = APIRouter()

# Register operational endpoints first for service-level concerns.
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])

# Register business/domain endpoints consumed by the application UI.
api_router.include_router(account_router, prefix="/account", tags=["account"])
api_router.include_router(medications_router, prefix="/medications", tags=["medications"])
api_router.include_router(doses_router, prefix="/doses", tags=["doses"])
api_router.include_router(sync_router, prefix="/sync", tags=["sync"])
