"""Module: seed_data."""

from faker import Faker
import csv
import random
import string
from pathlib import Path
from sqlalchemy import text

from medsguardian.db.init_db import init_db
from medsguardian.db.models.user import GUARDIAN, PATIENT, User
from medsguardian.db.session import SessionLocal, engine
from medsguardian.services import accounts, medications
from medsguardian.services.storage import Storage

fake = Faker()

MEDICINES = [
    ("Metformin", "500mg"),
    ("Lisinopril", "10mg"),
    ("Atorvastatin", "20mg"),
    ("Levothyroxine", "50mcg"),
    ("Amlodipine", "5mg"),
    ("Vitamin D", "1 capsule"),
    ("Aspirin", "81mg"),
    ("Omeprazole", "20mg"),
]
REMINDER_SLOTS = ["07:00", "08:00", "09:00", "12:30", "13:00", "18:00", "20:00", "21:30"]


# Shared helpers used by multiple seed builders.
def generate_password(length: int = 12) -> str:
    chars = string.ascii_letters + string.digits
    return "".join(random.choice(chars) for _ in range(length))


def export_credentials(rows: list[tuple[User, str]], out_path: Path | None = None) -> Path:
    out_path = out_path or Path(__file__).resolve().parent / "seeded_user_credentials.csv"
    with out_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["user_id", "email", "password", "role", "patient_code"])
        for user, password in rows:
            writer.writerow([str(user.id), user.email, password, user.role, user.patient_code or ""])
    return out_path


def reset_db(session) -> None:
    # Children first so FK dependencies clear cleanly on any backend.
    for table in ("med_logs", "medications", "users"):
        session.execute(text(f"DELETE FROM {table}"))
    session.commit()


def seed_family(storage: Storage, guardians: int = 1) -> list[tuple[User, str]]:
    """One patient with a few medications, plus guardians following them."""
    password = generate_password()
    patient = accounts.signup(
        storage,
        name=fake.name(),
        email=fake.unique.email(),
        password=password,
        role=PATIENT,
    )
    created = [(patient, password)]

    guardian_rows = []
    for _ in range(guardians):
        guardian_password = generate_password()
        guardian = accounts.signup(
            storage,
            name=fake.name(),
            email=fake.unique.email(),
            password=guardian_password,
            role=GUARDIAN,
            patient_code=patient.patient_code,
        )
        guardian_rows.append((guardian, guardian_password))
    created.extend(guardian_rows)

    if guardian_rows:
        manager = guardian_rows[0][0]
        for name, dosage in random.sample(MEDICINES, k=random.randint(1, 4)):
            medications.save_medication(
                storage,
                manager,
                name=name,
                dosage=dosage,
                times=random.sample(REMINDER_SLOTS, k=random.randint(1, 3)),
                frequency="daily",
                is_high_priority=random.random() < 0.25,
            )

    return created


def seed(storage: Storage, families: int = 5) -> list[tuple[User, str]]:
    rows: list[tuple[User, str]] = []
    for _ in range(families):
        rows.extend(seed_family(storage, guardians=random.randint(1, 2)))
    return rows


if __name__ == "__main__":
    if SessionLocal is None:
        raise SystemExit("DATABASE_URL is not set")

    init_db(engine)
    session = SessionLocal()
    try:
        print("Resetting tables...")
        reset_db(session)
    finally:
        session.close()

    print("Seeding families (5)...")
    rows = seed(Storage(SessionLocal))
    creds_path = export_credentials(rows)
    print(f"Done. users={len(rows)}")
    print(f"Credentials export: {creds_path}")
