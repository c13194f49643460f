"""Tests for treatment history hooks."""
from dental_client.context import AppContext
from dental_client.schemas.treatment_history import TreatmentRecord, TreatmentRecordCreate
from dental_client.services.medical_notes import medical_notes_key, use_medical_notes
from dental_client.services.treatment_history import (
    treatment_history_key,
    use_create_treatment_record,
    use_treatment_history,
)
from tests.fake_api import FakePracticeApi

HISTORY_PATH = "/api/patients/7/treatment-history"


async def test__use_treatment_history__disabled_for_zero_patient_id(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    state = await use_treatment_history(app_context, 0).load()
    assert state.is_idle
    assert fake_api.requests == []


async def test__create_treatment_record__invalidates_history_not_notes(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    await use_treatment_history(app_context, 7).load()
    await use_medical_notes(app_context, 7).load()

    record = await use_create_treatment_record(app_context).run(
        TreatmentRecordCreate(
            patient_id=7, treatment_type="filling", description="Composite", cost=6000,
        ),
    )

    assert isinstance(record, TreatmentRecord)
    assert record.cost == 6000
    cache = app_context.query_cache
    assert cache.get_entry(treatment_history_key(7)).is_stale
    assert cache.get_entry(medical_notes_key(7)).is_fresh

    state = await use_treatment_history(app_context, 7).load()
    assert [r.treatment_type for r in state.data] == ["filling"]
    assert fake_api.request_count("GET", HISTORY_PATH) == 2
