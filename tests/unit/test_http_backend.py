"""Unit tests for the httpx content backend adapter (httpx.MockTransport)."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from src.config.settings import Settings
from src.models.document import RetrainFrequency, RetrainSchedule
from src.models.submission import UploadedFile
from src.providers.backend.http_backend import HttpContentBackend
from src.utils.errors import BackendTimeoutError, DispatchError


def _backend(
    settings: Settings,
    handler: Callable[[httpx.Request], httpx.Response],
) -> HttpContentBackend:
    client = httpx.AsyncClient(
        base_url=settings.backend_base_url,
        transport=httpx.MockTransport(handler),
    )
    return HttpContentBackend(settings, client=client)


class _Recorder:
    """Handler that records requests and replies with a canned response."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


class TestListDocuments:
    @pytest.mark.asyncio
    async def test_wrapped_shape(self, settings) -> None:
        recorder = _Recorder(
            httpx.Response(200, json={"documents": [{"id": 1, "contentType": "pdf"}]})
        )
        backend = _backend(settings, recorder)

        documents = await backend.list_documents(7)

        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/api/documents"
        assert request.url.params["botId"] == "7"
        assert [d.id for d in documents] == [1]
        assert documents[0].label == "PDF"

    @pytest.mark.asyncio
    async def test_bare_list_shape(self, settings) -> None:
        backend = _backend(settings, _Recorder(httpx.Response(200, json=[{"id": 2}, {"id": 3}])))
        assert [d.id for d in await backend.list_documents(7)] == [2, 3]

    @pytest.mark.asyncio
    async def test_empty_body(self, settings) -> None:
        backend = _backend(settings, _Recorder(httpx.Response(200)))
        assert await backend.list_documents(7) == []


class TestErrors:
    @pytest.mark.asyncio
    async def test_error_payload_message_is_extracted(self, settings) -> None:
        backend = _backend(
            settings, _Recorder(httpx.Response(400, json={"error": "Unsupported document"}))
        )

        with pytest.raises(DispatchError) as exc_info:
            await backend.add_text(42, 7, "Title", "Body")

        assert exc_info.value.status_code == 400
        assert exc_info.value.backend_message == "Unsupported document"
        assert exc_info.value.provider_name == "http_backend"

    @pytest.mark.asyncio
    async def test_message_and_detail_keys(self, settings) -> None:
        backend = _backend(settings, _Recorder(httpx.Response(422, json={"detail": "Bad url"})))
        with pytest.raises(DispatchError) as exc_info:
            await backend.extract_video(42, 7, "x")
        assert exc_info.value.backend_message == "Bad url"

    @pytest.mark.asyncio
    async def test_non_json_error_has_no_backend_message(self, settings) -> None:
        backend = _backend(settings, _Recorder(httpx.Response(500, text="Internal Server Error")))
        with pytest.raises(DispatchError) as exc_info:
            await backend.list_documents(7)
        assert exc_info.value.status_code == 500
        assert exc_info.value.backend_message is None

    @pytest.mark.asyncio
    async def test_transport_timeout(self, settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        backend = _backend(settings, handler)
        with pytest.raises(BackendTimeoutError) as exc_info:
            await backend.list_documents(7)
        assert exc_info.value.backend_message == "Request timed out after 30s"

    @pytest.mark.asyncio
    async def test_connection_error(self, settings) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        backend = _backend(settings, handler)
        with pytest.raises(DispatchError) as exc_info:
            await backend.list_documents(7)
        assert not isinstance(exc_info.value, BackendTimeoutError)
        assert exc_info.value.backend_message is None


class TestIngestion:
    @pytest.mark.asyncio
    async def test_single_file_uses_file_field(self, settings) -> None:
        recorder = _Recorder(httpx.Response(200, json={"success": True}))
        backend = _backend(settings, recorder)

        await backend.upload_files(
            42, 7, [UploadedFile(filename="a.pdf", content=b"%PDF", media_type="application/pdf")]
        )

        body = recorder.requests[0].content
        assert recorder.requests[0].url.path == "/api/content/upload"
        assert b'name="file"; filename="a.pdf"' in body
        assert b'name="customerId"' in body
        assert b'name="botId"' in body

    @pytest.mark.asyncio
    async def test_several_files_use_files_field(self, settings) -> None:
        recorder = _Recorder(httpx.Response(200))
        backend = _backend(settings, recorder)

        await backend.upload_files(
            42,
            7,
            [
                UploadedFile(filename="a.txt", content=b"a", media_type="text/plain"),
                UploadedFile(filename="b.csv", content=b"b"),
            ],
        )

        body = recorder.requests[0].content
        assert body.count(b'name="files"') == 2

    @pytest.mark.asyncio
    async def test_add_text_payload(self, settings) -> None:
        recorder = _Recorder(httpx.Response(201, json={"id": 9}))
        backend = _backend(settings, recorder)

        await backend.add_text(42, 7, "Q&A: Hours?", "Q: Hours?\n\nA: 9-5")

        assert recorder.requests[0].url.path == "/api/content/text"
        assert recorder.last_json == {
            "customerId": 42,
            "botId": 7,
            "title": "Q&A: Hours?",
            "content": "Q: Hours?\n\nA: 9-5",
        }

    @pytest.mark.asyncio
    async def test_scrape_full_site(self, settings) -> None:
        recorder = _Recorder(httpx.Response(200, json={"pagesScraped": 12}))
        backend = _backend(settings, recorder)

        result = await backend.scrape_website(42, 7, "https://example.com", True)

        assert recorder.requests[0].url.path == "/api/content/scrape"
        assert recorder.last_json["fullSite"] is True
        assert recorder.last_json["mode"] == "full"
        assert result.pages_scraped == 12
        assert result.title is None

    @pytest.mark.asyncio
    async def test_scrape_endpoint_is_configurable(self, settings) -> None:
        recorder = _Recorder(httpx.Response(200, json={"title": "Example", "pages_scraped": 1}))
        backend = _backend(
            settings.model_copy(update={"scrape_endpoint": "content/scrape-website"}), recorder
        )

        result = await backend.scrape_website(42, 7, "https://example.com", False)

        assert recorder.requests[0].url.path == "/api/content/scrape-website"
        assert recorder.last_json["mode"] == "single"
        assert result.title == "Example"
        assert result.pages_scraped == 1

    @pytest.mark.asyncio
    async def test_extract_video(self, settings) -> None:
        recorder = _Recorder(httpx.Response(200))
        backend = _backend(settings, recorder)

        await backend.extract_video(42, 7, "https://youtu.be/abc")

        assert recorder.requests[0].url.path == "/api/content/youtube"
        assert recorder.last_json["url"] == "https://youtu.be/abc"


class TestBulk:
    @pytest.mark.asyncio
    async def test_retrain_reports_count(self, settings) -> None:
        recorder = _Recorder(httpx.Response(200, json={"retrained": 3}))
        backend = _backend(settings, recorder)

        assert await backend.retrain_documents(42, 7, [1, 2, 3]) == 3
        assert recorder.requests[0].url.path == "/api/content/retrain"
        assert recorder.last_json["documentIds"] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_delete_without_count(self, settings) -> None:
        recorder = _Recorder(httpx.Response(204))
        backend = _backend(settings, recorder)

        assert await backend.delete_documents(42, 7, [4]) is None
        assert recorder.requests[0].url.path == "/api/content/delete-bulk"


class TestSchedule:
    @pytest.mark.asyncio
    async def test_get_schedule_snake_case(self, settings) -> None:
        recorder = _Recorder(
            httpx.Response(200, json={"retrain_frequency": "weekly", "retrain_time": "02:00"})
        )
        backend = _backend(settings, recorder)

        schedule = await backend.get_retrain_schedule(7)

        assert recorder.requests[0].url.path == "/api/content/retrain-schedule/7"
        assert schedule == RetrainSchedule(frequency=RetrainFrequency.WEEKLY, time="02:00")

    @pytest.mark.asyncio
    async def test_save_disabled_sends_nulls(self, settings) -> None:
        recorder = _Recorder(httpx.Response(200, json={"success": True}))
        backend = _backend(settings, recorder)

        stored = await backend.save_retrain_schedule(7, RetrainSchedule.disabled())

        assert recorder.last_json == {"botId": 7, "frequency": None, "time": None}
        assert stored is None

    @pytest.mark.asyncio
    async def test_save_parses_echo(self, settings) -> None:
        recorder = _Recorder(httpx.Response(200, json={"frequency": "daily", "time": "04:30"}))
        backend = _backend(settings, recorder)

        stored = await backend.save_retrain_schedule(
            7, RetrainSchedule(frequency=RetrainFrequency.DAILY, time="04:30")
        )

        assert recorder.last_json == {"botId": 7, "frequency": "daily", "time": "04:30"}
        assert stored == RetrainSchedule(frequency=RetrainFrequency.DAILY, time="04:30")


class TestClientLifecycle:
    def test_auth_header(self, settings) -> None:
        assert HttpContentBackend._auth_headers(settings) == {
            "Authorization": "Bearer test-token"
        }
        anonymous = settings.model_copy(update={"backend_api_token": ""})
        assert HttpContentBackend._auth_headers(anonymous) == {}

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, settings) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        backend = HttpContentBackend(settings, client=client)

        await backend.aclose()

        assert client.is_closed is False
        await client.aclose()

    def test_provider_name(self, settings) -> None:
        assert HttpContentBackend(settings).get_provider_name() == "http_backend"


class TestUnreadablePayloads:
    @pytest.mark.asyncio
    async def test_document_without_id_is_dispatch_error(self, settings) -> None:
        backend = _backend(
            settings, _Recorder(httpx.Response(200, json={"documents": [{"title": "No id"}]}))
        )

        with pytest.raises(DispatchError) as exc_info:
            await backend.list_documents(7)

        assert exc_info.value.backend_message is None
        assert exc_info.value.provider_name == "http_backend"

    @pytest.mark.asyncio
    async def test_null_document_fields_load(self, settings) -> None:
        backend = _backend(
            settings,
            _Recorder(httpx.Response(200, json={"documents": [{"id": 1, "title": None}]})),
        )

        documents = await backend.list_documents(7)

        assert documents[0].title == ""
        assert documents[0].label == "Unknown"

    @pytest.mark.asyncio
    async def test_schedule_time_with_seconds(self, settings) -> None:
        backend = _backend(
            settings,
            _Recorder(
                httpx.Response(200, json={"retrain_frequency": "daily", "retrain_time": "03:00:00"})
            ),
        )

        schedule = await backend.get_retrain_schedule(7)

        assert schedule == RetrainSchedule(frequency=RetrainFrequency.DAILY, time="03:00")

    @pytest.mark.asyncio
    async def test_unknown_frequency_is_dispatch_error(self, settings) -> None:
        backend = _backend(
            settings,
            _Recorder(httpx.Response(200, json={"frequency": "hourly", "time": "03:00"})),
        )

        with pytest.raises(DispatchError):
            await backend.get_retrain_schedule(7)
