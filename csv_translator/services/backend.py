from __future__ import annotations

from typing import Any, Protocol

"""Translation backend adapters.

The core only relies on the `TranslationBackend` protocol: one source text in,
zero or more translated strings out, `BackendError` on failure. The production
implementation wraps the Google Cloud Translation v3 API.
"""

__all__ = [
    "BackendError",
    "TranslationBackend",
    "GoogleTranslateBackend",
    "DEFAULT_LOCATION",
    "DEFAULT_TARGET_LANGUAGE",
    "DEFAULT_TIMEOUT_SECONDS",
]

DEFAULT_LOCATION = "global"
DEFAULT_TARGET_LANGUAGE = "en"
DEFAULT_TIMEOUT_SECONDS = 30.0
MIME_TYPE = "text/plain"


class BackendError(Exception):
    """Raised when a backend call fails (network, quota, deadline, auth...)."""


class TranslationBackend(Protocol):
    def translate(self, text: str) -> list[str]: ...


class GoogleTranslateBackend:
    """Google Cloud Translation v3 (`TranslationServiceClient.translate_text`).

    Credentials are resolved by the client library (Application Default
    Credentials); only the project id is passed explicitly. A per-call
    `timeout` bounds hung requests; a deadline error is reported like any
    other backend failure so the cell falls back to pass-through.
    """

    def __init__(
        self,
        project_id: str,
        location: str = DEFAULT_LOCATION,
        target_language: str = DEFAULT_TARGET_LANGUAGE,
        timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
        client: Any = None,
    ) -> None:
        if not project_id:
            raise BackendError("project id is required")
        self.project_id = project_id
        self.location = location
        self.target_language = target_language
        self.timeout = timeout
        if client is None:
            try:
                from google.cloud import translate_v3
            except ImportError as e:
                raise BackendError(f"google-cloud-translate not available: {e}") from e
            try:
                client = translate_v3.TranslationServiceClient()
            except Exception as e:  # 認証情報なし等
                raise BackendError(f"failed to create translation client: {e}") from e
        self._client = client

    @property
    def parent(self) -> str:
        return f"projects/{self.project_id}/locations/{self.location}"

    def translate(self, text: str) -> list[str]:
        request = {
            "parent": self.parent,
            "contents": [text],
            "mime_type": MIME_TYPE,
            "target_language_code": self.target_language,
        }
        kwargs: dict[str, Any] = {"request": request}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        try:
            response = self._client.translate_text(**kwargs)
        except Exception as e:
            raise BackendError(str(e)) from e
        return [t.translated_text for t in response.translations]

    def close(self) -> None:
        transport = getattr(self._client, "transport", None)
        if transport is not None and hasattr(transport, "close"):
            transport.close()

    def __enter__(self) -> GoogleTranslateBackend:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
