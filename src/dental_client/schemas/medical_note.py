"""Pydantic schemas for patient medical notes."""
from datetime import datetime

from pydantic import PositiveInt

from dental_client.schemas.base import ApiModel


class MedicalNote(ApiModel):
    """A medical note as returned by the API."""

    id: int
    patient_id: int
    title: str
    content: str
    note_type: str
    created_at: datetime
    # Present on newer API versions only
    created_by: str | None = None
    updated_at: datetime | None = None


class MedicalNoteCreate(ApiModel):
    """Input for creating a medical note. ``patient_id`` selects the endpoint, not the body."""

    patient_id: PositiveInt
    title: str
    content: str
    note_type: str

    def request_body(self) -> dict:
        return self.to_json_dict(exclude={"patient_id"})
