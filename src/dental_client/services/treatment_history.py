"""Read and write hooks for a patient's treatment history."""
from functools import partial
from typing import TYPE_CHECKING

from dental_client.core.query import Mutation, Query
from dental_client.core.query_cache import CacheKey
from dental_client.schemas.treatment_history import TreatmentRecord, TreatmentRecordCreate
from dental_client.services.api_client import ApiClient, decode
from dental_client.services.resources import (
    is_valid_patient_id,
    patient_resource_key,
    patient_resource_path,
)

if TYPE_CHECKING:
    from dental_client.context import AppContext

RESOURCE = "treatment-history"


def treatment_history_key(patient_id: int) -> CacheKey:
    return patient_resource_key(patient_id, RESOURCE)


async def fetch_treatment_history(api: ApiClient, patient_id: int) -> list[TreatmentRecord]:
    path = patient_resource_path(patient_id, RESOURCE)
    payload = await api.get_json(path)
    return decode(list[TreatmentRecord], payload, f"GET {path}")


async def create_treatment_record(
    api: ApiClient, record: TreatmentRecordCreate,
) -> TreatmentRecord:
    path = patient_resource_path(record.patient_id, RESOURCE)
    payload = await api.post_json(path, record.request_body())
    return decode(TreatmentRecord, payload, f"POST {path}")


def use_treatment_history(
    ctx: "AppContext", patient_id: int, enabled: bool = True,
) -> Query:
    return Query(
        ctx.query_cache,
        treatment_history_key(patient_id),
        partial(fetch_treatment_history, ctx.api, patient_id),
        enabled=enabled and is_valid_patient_id(patient_id),
    )


def use_create_treatment_record(
    ctx: "AppContext",
) -> Mutation[TreatmentRecordCreate, TreatmentRecord]:
    return Mutation(
        ctx.query_cache,
        partial(create_treatment_record, ctx.api),
        invalidates=lambda record: [treatment_history_key(record.patient_id)],
    )
