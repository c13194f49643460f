"""Tests for medical note hooks against the in-process fake API."""
import asyncio

import pytest

from dental_client.context import AppContext
from dental_client.core.errors import HttpError, MutationError
from dental_client.core.query_cache import QueryStatus
from dental_client.schemas.medical_note import MedicalNote, MedicalNoteCreate
from dental_client.services.medical_notes import (
    medical_notes_key,
    use_create_medical_note,
    use_medical_notes,
)
from tests.fake_api import FakePracticeApi

NOTES_PATH = "/api/patients/7/medical-notes"


def exam_note(patient_id: int = 7) -> MedicalNoteCreate:
    return MedicalNoteCreate(patient_id=patient_id, title="T", content="C", note_type="exam")


async def wait_for_requests(fake_api: FakePracticeApi, method: str, path: str, n: int) -> None:
    for _ in range(200):
        if fake_api.request_count(method, path) >= n:
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"expected {n} {method} {path} request(s)")


def test__medical_notes_key__is_hierarchical() -> None:
    assert medical_notes_key(7) == ("/api/patients", 7, "medical-notes")


@pytest.mark.parametrize("patient_id", [0, -1, None, True])
async def test__use_medical_notes__invalid_patient_id_is_idle(
    app_context: AppContext, fake_api: FakePracticeApi, patient_id: object,
) -> None:
    query = use_medical_notes(app_context, patient_id)  # type: ignore[arg-type]

    state = await query.load()

    assert state.status is QueryStatus.IDLE
    assert fake_api.requests == []


async def test__use_medical_notes__loads_and_decodes_notes(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    await use_create_medical_note(app_context).run(exam_note())

    state = await use_medical_notes(app_context, 7).load()

    assert state.is_success
    assert [type(n) for n in state.data] == [MedicalNote]
    assert state.data[0].title == "T"
    assert fake_api.request_count("GET", NOTES_PATH) == 1


async def test__use_medical_notes__concurrent_readers_share_one_request(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    fake_api.read_gate = asyncio.Event()
    first = asyncio.create_task(use_medical_notes(app_context, 7).load())
    second = asyncio.create_task(use_medical_notes(app_context, 7).load())
    await wait_for_requests(fake_api, "GET", NOTES_PATH, 1)

    fake_api.read_gate.set()
    states = await asyncio.gather(first, second)

    assert all(s.is_success for s in states)
    assert fake_api.request_count("GET", NOTES_PATH) == 1


async def test__use_medical_notes__second_read_is_served_from_cache(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    await use_medical_notes(app_context, 7).load()
    await use_medical_notes(app_context, 7).load()

    assert fake_api.request_count("GET", NOTES_PATH) == 1


async def test__use_medical_notes__server_error_is_reported_in_state(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    fake_api.fail_reads_with = 503
    query = use_medical_notes(app_context, 7)

    state = await query.load()

    assert state.is_error
    assert isinstance(state.error, HttpError)
    assert state.error.status_code == 503
    assert app_context.query_cache.get_entry(medical_notes_key(7)) is not None

    fake_api.fail_reads_with = None
    state = await query.refetch()
    assert state.is_success
    assert state.data == []


async def test__create_medical_note__posts_body_and_returns_note(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    note = await use_create_medical_note(app_context).run(exam_note())

    assert isinstance(note, MedicalNote)
    assert note.patient_id == 7
    assert note.note_type == "exam"
    assert fake_api.request_count("POST", NOTES_PATH) == 1
    assert fake_api.notes[7][0]["title"] == "T"


async def test__create_medical_note__failure_raises_and_keeps_cache_fresh(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    await use_medical_notes(app_context, 7).load()
    fake_api.fail_writes_with = 500

    with pytest.raises(MutationError) as exc_info:
        await use_create_medical_note(app_context).run(exam_note())

    assert exc_info.value.status_code == 500
    assert exc_info.value.endpoint == f"POST {NOTES_PATH}"
    assert app_context.query_cache.get_entry(medical_notes_key(7)).is_fresh


async def test__create_medical_note__only_invalidates_that_patients_notes(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    await use_medical_notes(app_context, 7).load()
    await use_medical_notes(app_context, 8).load()

    await use_create_medical_note(app_context).run(exam_note(7))

    cache = app_context.query_cache
    assert cache.get_entry(medical_notes_key(7)).is_stale
    assert cache.get_entry(medical_notes_key(8)).is_fresh


async def test__scenario__enable_read_then_write_triggers_background_refetch(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    """Disabled read, enabled read, then a write refreshes the mounted reader."""
    async with use_medical_notes(app_context, 7, enabled=False) as query:
        assert (await query.load()).is_idle
        assert fake_api.requests == []

        query.set_enabled(True)
        state = await query.load()
        assert state.is_success
        assert state.data == []
        assert fake_api.request_count("GET", NOTES_PATH) == 1

        created = await use_create_medical_note(app_context).run(exam_note())
        assert created.id == 1

        entry = app_context.query_cache.get_entry(medical_notes_key(7))
        assert entry.is_stale
        assert entry.is_fetching

        await app_context.query_cache.wait_for_fetches()
        assert fake_api.request_count("GET", NOTES_PATH) == 2
        assert [n.id for n in query.state.data] == [1]
        assert query.state.is_success
        assert not query.state.is_stale


async def test__unmounted_reader__refetch_waits_for_next_read(
    app_context: AppContext, fake_api: FakePracticeApi,
) -> None:
    async with use_medical_notes(app_context, 7) as query:
        await query.load()

    await use_create_medical_note(app_context).run(exam_note())
    await app_context.query_cache.wait_for_fetches()
    assert fake_api.request_count("GET", NOTES_PATH) == 1

    state = await use_medical_notes(app_context, 7).load()
    assert fake_api.request_count("GET", NOTES_PATH) == 2
    assert len(state.data) == 1
