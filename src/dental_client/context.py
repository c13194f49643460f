"""Process-wide client state: settings, API client, query cache, storage and stores."""
import logging
from dataclasses import dataclass

import httpx

from dental_client.core.config import Settings, get_settings
from dental_client.core.query_cache import QueryCache
from dental_client.core.storage import Storage, build_storage
from dental_client.services.api_client import ApiClient
from dental_client.services.language import LanguageStore
from dental_client.services.session import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """
    Everything the hooks share, created once at start-up and passed to consumers.

    Create with ``AppContext.create()``; release with ``aclose()``.
    """

    settings: Settings
    api: ApiClient
    query_cache: QueryCache
    storage: Storage
    session: SessionStore
    language: LanguageStore

    @classmethod
    async def create(
        cls,
        settings: Settings | None = None,
        storage: Storage | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AppContext":
        """Build the context and rehydrate persisted session and language state."""
        settings = settings or get_settings()
        storage = storage or await build_storage(settings)
        api = ApiClient(settings.api_base_url, timeout=settings.request_timeout, transport=transport)
        session = await SessionStore.load(storage, settings.session_storage_key)
        language = await LanguageStore.load(
            storage, settings.language_storage_key, settings.default_language,
        )
        logger.info(
            "app_context_created",
            extra={
                "api_base_url": settings.api_base_url,
                "storage_backend": settings.storage_backend,
                "authenticated": session.is_authenticated,
            },
        )
        return cls(
            settings=settings,
            api=api,
            query_cache=QueryCache(),
            storage=storage,
            session=session,
            language=language,
        )

    def reset(self) -> None:
        """Forget every cached query. Session and language state are kept."""
        self.query_cache.reset()

    async def aclose(self) -> None:
        self.query_cache.reset()
        await self.api.aclose()
        await self.storage.close()


# Global context state using a container to avoid global statement
class _ContextState:
    """Container for the process-wide AppContext."""

    context: AppContext | None = None


_state = _ContextState()


def get_app_context() -> AppContext:
    """Get the process-wide AppContext; raises if it has not been set."""
    if _state.context is None:
        raise RuntimeError("AppContext has not been initialized; call set_app_context() first")
    return _state.context


def set_app_context(context: AppContext | None) -> None:
    """Set (or clear, with None) the process-wide AppContext."""
    _state.context = context
