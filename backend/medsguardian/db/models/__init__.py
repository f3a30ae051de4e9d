# backend/medsguardian/db/models/__init__.py

from medsguardian.db.models.user import User
from medsguardian.db.models.medication import Medication
from medsguardian.db.models.med_log import MedLog
