"""Read and write hooks for a patient's medical notes."""
from functools import partial
from typing import TYPE_CHECKING

from dental_client.core.query import Mutation, Query
from dental_client.core.query_cache import CacheKey
from dental_client.schemas.medical_note import MedicalNote, MedicalNoteCreate
from dental_client.services.api_client import ApiClient, decode
from dental_client.services.resources import (
    is_valid_patient_id,
    patient_resource_key,
    patient_resource_path,
)

if TYPE_CHECKING:
    from dental_client.context import AppContext

RESOURCE = "medical-notes"


def medical_notes_key(patient_id: int) -> CacheKey:
    return patient_resource_key(patient_id, RESOURCE)


async def fetch_medical_notes(api: ApiClient, patient_id: int) -> list[MedicalNote]:
    path = patient_resource_path(patient_id, RESOURCE)
    payload = await api.get_json(path)
    return decode(list[MedicalNote], payload, f"GET {path}")


async def create_medical_note(api: ApiClient, note: MedicalNoteCreate) -> MedicalNote:
    path = patient_resource_path(note.patient_id, RESOURCE)
    payload = await api.post_json(path, note.request_body())
    return decode(MedicalNote, payload, f"POST {path}")


def use_medical_notes(ctx: "AppContext", patient_id: int, enabled: bool = True) -> Query:
    """Reader for a patient's notes; only enabled for a positive integer ``patient_id``."""
    return Query(
        ctx.query_cache,
        medical_notes_key(patient_id),
        partial(fetch_medical_notes, ctx.api, patient_id),
        enabled=enabled and is_valid_patient_id(patient_id),
    )


def use_create_medical_note(ctx: "AppContext") -> Mutation[MedicalNoteCreate, MedicalNote]:
    """Writer that refreshes the patient's notes once the note is created."""
    return Mutation(
        ctx.query_cache,
        partial(create_medical_note, ctx.api),
        invalidates=lambda note: [medical_notes_key(note.patient_id)],
    )
