from fastapi import APIRouter, Depends

from medsguardian.api.v1.routes.deps import get_current_user, get_storage
from medsguardian.db.models.user import User
from medsguardian.domain.identity import patient_id_for
from medsguardian.services.storage import Storage

router = APIRouter()


# Endpoint: clients poll this and re-fetch their view when the revision moves.
@router.get("")
def sync_state(user: User = Depends(get_current_user), storage: Storage = Depends(get_storage)):
    return {
        "revision": storage.feed.revision_for(patient_id_for(user)),
        "configured": storage.is_configured,
    }
