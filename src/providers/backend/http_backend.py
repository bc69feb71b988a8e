"""HTTP adapter for the Content Processing Backend.

Implements :class:`IContentBackend` over the backend's REST endpoints
with ``httpx.AsyncClient``.  Every call is bounded by
``Settings.request_timeout_seconds``; a call that runs past it raises
:class:`BackendTimeoutError`.

Error payloads are unwrapped so the operator sees the backend's own
message: the first of ``error`` / ``message`` / ``detail`` found in a JSON
body, else ``None`` (the service then shows its static fallback).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from src.config.settings import Settings
from src.interfaces.content_backend import IContentBackend
from src.models.document import Document, RetrainSchedule
from src.models.submission import ScrapeResult, UploadedFile
from src.utils.concurrency import with_deadline
from src.utils.errors import BackendTimeoutError, DispatchError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "http_backend"
_ERROR_KEYS = ("error", "message", "detail")
_COUNT_KEYS = ("count", "retrained", "deleted")
_SCHEDULE_KEYS = ("frequency", "retrain_frequency", "retrainFrequency")


def _extract_error_message(response: httpx.Response) -> str | None:
    """Pull a human-readable message out of an error response body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in _ERROR_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return None


def _extract_count(body: Any) -> int | None:
    """Read an affected-document count from a bulk response, if present."""
    if isinstance(body, bool):
        return None
    if isinstance(body, int):
        return body
    if isinstance(body, dict):
        for key in _COUNT_KEYS:
            value = body.get(key)
            if isinstance(value, int) and not isinstance(value, bool):
                return value
    return None


class HttpContentBackend(IContentBackend):
    """Content backend reached over authenticated HTTPS.

    Parameters
    ----------
    settings:
        Supplies the base URL, bearer token, scrape endpoint and deadline.
    client:
        Optional pre-built ``httpx.AsyncClient`` (tests inject one with a
        ``MockTransport``).  When omitted the adapter owns its client and
        :meth:`aclose` closes it.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._timeout = settings.request_timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=settings.backend_base_url,
            headers=self._auth_headers(settings),
            timeout=httpx.Timeout(settings.request_timeout_seconds),
        )

    @staticmethod
    def _auth_headers(settings: Settings) -> dict[str, str]:
        if not settings.backend_api_token:
            return {}
        return {"Authorization": f"Bearer {settings.backend_api_token}"}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send one request and return the decoded JSON body (``None`` if empty).

        Raises
        ------
        BackendTimeoutError
            If the call outlives the configured deadline.
        DispatchError
            On transport failure or any non-2xx response.
        """
        try:
            response = await with_deadline(
                self._client.request(method, path, **kwargs),
                self._timeout,
                provider_name=_PROVIDER_NAME,
            )
        except httpx.TimeoutException as exc:
            raise BackendTimeoutError(
                provider_name=_PROVIDER_NAME,
                timeout_seconds=self._timeout,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("backend_transport_error", method=method, path=path, error=str(exc))
            raise DispatchError(
                message=f"{method} {path} failed: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if response.is_error:
            backend_message = _extract_error_message(response)
            logger.warning(
                "backend_error_response",
                method=method,
                path=path,
                status_code=response.status_code,
                backend_message=backend_message,
            )
            raise DispatchError(
                message=f"{method} {path} returned {response.status_code}",
                provider_name=_PROVIDER_NAME,
                status_code=response.status_code,
                backend_message=backend_message,
            )

        logger.debug("backend_response", method=method, path=path, status_code=response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # IContentBackend implementation
    # ------------------------------------------------------------------

    async def list_documents(self, bot_id: int) -> list[Document]:
        body = await self._request("GET", "documents", params={"botId": bot_id})
        # Either {"documents": [...]} or a bare list.
        if isinstance(body, dict):
            raw = body.get("documents") or []
        elif isinstance(body, list):
            raw = body
        else:
            raw = []
        try:
            return [Document.model_validate(item) for item in raw]
        except ValueError as exc:
            raise self._malformed("documents", exc) from exc

    async def get_retrain_schedule(self, bot_id: int) -> RetrainSchedule:
        path = f"content/retrain-schedule/{bot_id}"
        body = await self._request("GET", path)
        if not isinstance(body, dict):
            return RetrainSchedule.disabled()
        try:
            return RetrainSchedule.model_validate(body)
        except ValueError as exc:
            raise self._malformed(path, exc) from exc

    @staticmethod
    def _malformed(path: str, exc: ValueError) -> DispatchError:
        """A 2xx body the models cannot parse is a failed call, not a crash."""
        logger.warning("backend_malformed_payload", path=path, error=str(exc))
        return DispatchError(
            message=f"GET {path} returned an unreadable payload",
            provider_name=_PROVIDER_NAME,
        )

    async def upload_files(
        self,
        customer_id: int,
        bot_id: int,
        files: Sequence[UploadedFile],
    ) -> None:
        # One file goes out as "file", several as repeated "files" parts.
        field = "file" if len(files) == 1 else "files"
        multipart = [
            (field, (f.filename, f.content, f.media_type or "application/octet-stream"))
            for f in files
        ]
        await self._request(
            "POST",
            "content/upload",
            files=multipart,
            data={"customerId": str(customer_id), "botId": str(bot_id)},
        )

    async def add_text(self, customer_id: int, bot_id: int, title: str, content: str) -> None:
        await self._request(
            "POST",
            "content/text",
            json={"customerId": customer_id, "botId": bot_id, "title": title, "content": content},
        )

    async def scrape_website(
        self,
        customer_id: int,
        bot_id: int,
        url: str,
        full_site: bool,
    ) -> ScrapeResult:
        body = await self._request(
            "POST",
            self._settings.scrape_endpoint,
            json={
                "customerId": customer_id,
                "botId": bot_id,
                "url": url,
                "fullSite": full_site,
                "mode": "full" if full_site else "single",
            },
        )
        if not isinstance(body, dict):
            return ScrapeResult()
        pages = body.get("pagesScraped", body.get("pages_scraped"))
        title = body.get("title")
        return ScrapeResult(
            pages_scraped=pages if isinstance(pages, int) and not isinstance(pages, bool) else None,
            title=title if isinstance(title, str) else None,
        )

    async def extract_video(self, customer_id: int, bot_id: int, url: str) -> None:
        await self._request(
            "POST",
            "content/youtube",
            json={"customerId": customer_id, "botId": bot_id, "url": url},
        )

    async def retrain_documents(
        self,
        customer_id: int,
        bot_id: int,
        document_ids: Sequence[int],
    ) -> int | None:
        body = await self._request(
            "POST",
            "content/retrain",
            json={"customerId": customer_id, "botId": bot_id, "documentIds": list(document_ids)},
        )
        return _extract_count(body)

    async def delete_documents(
        self,
        customer_id: int,
        bot_id: int,
        document_ids: Sequence[int],
    ) -> int | None:
        body = await self._request(
            "POST",
            "content/delete-bulk",
            json={"customerId": customer_id, "botId": bot_id, "documentIds": list(document_ids)},
        )
        return _extract_count(body)

    async def save_retrain_schedule(
        self,
        bot_id: int,
        schedule: RetrainSchedule,
    ) -> RetrainSchedule | None:
        body = await self._request(
            "POST",
            "content/retrain-schedule",
            json={
                "botId": bot_id,
                "frequency": schedule.frequency.value if schedule.is_enabled else None,
                "time": schedule.time if schedule.is_enabled else None,
            },
        )
        if not isinstance(body, dict) or not any(key in body for key in _SCHEDULE_KEYS):
            return None
        try:
            return RetrainSchedule.model_validate(body)
        except ValueError:
            # Acknowledged but not echoed in a shape we understand.
            return None

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME
