"""Module: health."""

from fastapi import APIRouter, Depends

from medsguardian.api.v1.routes.deps import get_storage
from medsguardian.services.storage import Storage

router = APIRouter()

# Endpoint: liveness probe; also reports whether a database is configured.
@router.get("/health")
def health(storage: Storage = Depends(get_storage)):
    return {
        "status": "ok",
        "service": "medsguardian",
        "database": "configured" if storage.is_configured else "not configured",
    }
