"""Pydantic schemas for API records and client state."""
from dental_client.schemas.employee import Employee, SessionState
from dental_client.schemas.medical_note import MedicalNote, MedicalNoteCreate
from dental_client.schemas.patient import PatientSummary
from dental_client.schemas.treatment_history import TreatmentRecord, TreatmentRecordCreate

__all__ = [
    "Employee",
    "MedicalNote",
    "MedicalNoteCreate",
    "PatientSummary",
    "SessionState",
    "TreatmentRecord",
    "TreatmentRecordCreate",
]
