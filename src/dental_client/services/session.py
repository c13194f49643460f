"""
Persisted authentication state for the signed-in employee.

The state is written to durable storage on every change and read back at
start-up, so a session survives restarts. The stored blob uses the same
``{"state": {...}, "version": N}`` envelope as the web client.
"""
import json
import logging
from collections.abc import Callable

from pydantic import ValidationError

from dental_client.core.errors import StorageError
from dental_client.core.storage import Storage
from dental_client.schemas.employee import Employee, SessionState

logger = logging.getLogger(__name__)

SESSION_STORAGE_KEY = "dental-auth"
STORAGE_VERSION = 0

SessionListener = Callable[[SessionState], None]


def encode_session(state: SessionState) -> str:
    return json.dumps({"state": state.to_json_dict(), "version": STORAGE_VERSION})


def decode_session(raw: str, key: str = SESSION_STORAGE_KEY) -> SessionState:
    """
    Parse a persisted session blob.

    Raises:
        StorageError: If the blob is not valid JSON or not a well-formed session.
    """
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(key, f"invalid JSON: {e.msg}") from e
    if not isinstance(envelope, dict) or "state" not in envelope:
        raise StorageError(key, "missing 'state' envelope")
    try:
        return SessionState.model_validate(envelope["state"])
    except ValidationError as e:
        raise StorageError(key, f"{e.error_count()} validation error(s)") from e


class SessionStore:
    """
    Anonymous/Authenticated state machine mirrored to durable storage.

    Only ``login`` and ``logout`` change the state. Both update the in-memory
    state before writing to storage, so readers never see a partial update.
    """

    def __init__(
        self,
        storage: Storage,
        storage_key: str = SESSION_STORAGE_KEY,
        state: SessionState | None = None,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._state = state or SessionState.anonymous()
        self._listeners: list[SessionListener] = []

    @classmethod
    async def load(cls, storage: Storage, storage_key: str = SESSION_STORAGE_KEY) -> "SessionStore":
        """Rehydrate from storage; an absent or malformed blob starts Anonymous."""
        raw = await storage.get_item(storage_key)
        if raw is None:
            return cls(storage, storage_key)
        try:
            state = decode_session(raw, storage_key)
        except StorageError as e:
            logger.warning("session_rehydrate_failed", extra={"key": storage_key, "error": str(e)})
            return cls(storage, storage_key)
        return cls(storage, storage_key, state)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def employee(self) -> Employee | None:
        return self._state.employee

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def login(self, employee: Employee) -> None:
        """Become Authenticated as ``employee``. Credentials are checked by the caller."""
        await self._set(SessionState.authenticated(employee))
        logger.info("session_login", extra={"employee_id": employee.id})

    async def logout(self) -> None:
        """Become Anonymous. Safe to call when already signed out."""
        await self._set(SessionState.anonymous())
        logger.info("session_logout")

    async def _set(self, state: SessionState) -> None:
        self._state = state
        await self._storage.set_item(self._storage_key, encode_session(state))
        for listener in list(self._listeners):
            listener(state)
