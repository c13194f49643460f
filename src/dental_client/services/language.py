"""Persisted UI language preference."""
import logging

from dental_client.core.storage import Storage

logger = logging.getLogger(__name__)

LANGUAGE_STORAGE_KEY = "language"
DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "sr")


class LanguageStore:
    """Holds the current language and writes every change to storage as a bare string."""

    def __init__(
        self,
        storage: Storage,
        storage_key: str = LANGUAGE_STORAGE_KEY,
        language: str = DEFAULT_LANGUAGE,
    ) -> None:
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: '{language}'")
        self._storage = storage
        self._storage_key = storage_key
        self._language = language

    @classmethod
    async def load(
        cls,
        storage: Storage,
        storage_key: str = LANGUAGE_STORAGE_KEY,
        default: str = DEFAULT_LANGUAGE,
    ) -> "LanguageStore":
        """Read the saved language; missing or unsupported values fall back to ``default``."""
        saved = await storage.get_item(storage_key)
        if saved in SUPPORTED_LANGUAGES:
            return cls(storage, storage_key, saved)
        if saved is not None:
            logger.warning("language_unsupported", extra={"key": storage_key, "value": saved})
        return cls(storage, storage_key, default)

    @property
    def language(self) -> str:
        return self._language

    async def set_language(self, language: str) -> None:
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Unsupported language: '{language}'. "
                f"Use one of: {', '.join(SUPPORTED_LANGUAGES)}.",
            )
        self._language = language
        await self._storage.set_item(self._storage_key, language)
