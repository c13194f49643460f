"""Schemas for patient records used by presentation helpers."""
from dental_client.schemas.base import ApiModel


class PatientSummary(ApiModel):
    """The subset of a patient record needed to render an avatar."""

    first_name: str
    last_name: str
    profile_picture: str | None = None
