"""Pydantic schemas for patient treatment history."""
from datetime import datetime

from pydantic import PositiveInt

from dental_client.schemas.base import ApiModel


class TreatmentRecord(ApiModel):
    """A completed treatment as returned by the API."""

    id: int
    patient_id: int
    appointment_id: int | None = None
    treatment_type: str
    description: str
    tooth_numbers: str | None = None  # e.g. "11,12,21"
    duration: int | None = None  # minutes
    cost: int | None = None  # minor currency units
    currency: str | None = None
    status: str | None = None
    notes: str | None = None
    performed_by: str | None = None
    performed_at: datetime | None = None
    created_at: datetime


class TreatmentRecordCreate(ApiModel):
    """Input for recording a treatment. Unset optional fields are left out of the body."""

    patient_id: PositiveInt
    treatment_type: str
    description: str
    tooth_numbers: str | None = None
    duration: int | None = None
    cost: int | None = None
    currency: str | None = None
    notes: str | None = None

    def request_body(self) -> dict:
        return self.to_json_dict(exclude={"patient_id"}, exclude_none=True)
