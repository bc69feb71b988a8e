"""Unit tests for the document registry and its selection set."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from src.models.document import Document
from src.providers.backend.http_backend import HttpContentBackend
from src.services.document_registry import MSG_LOAD_FAILED, DocumentRegistry
from src.utils.errors import DispatchError, LoadError


class TestLoad:
    @pytest.mark.asyncio
    async def test_load_replaces_documents(self, registry, backend, sample_documents) -> None:
        documents = await registry.load(7)

        backend.list_documents.assert_awaited_once_with(7)
        assert documents == tuple(sample_documents)
        assert registry.bot_id == 7
        assert len(registry) == 4
        assert registry.loading is False
        assert registry.get(3).title == "Example"
        assert registry.get(99) is None

    @pytest.mark.asyncio
    async def test_reload_prunes_selection_to_surviving_ids(
        self, registry, backend, sample_documents
    ) -> None:
        await registry.load(7)
        registry.select([1, 2])
        backend.list_documents.return_value = [d for d in sample_documents if d.id != 2]

        await registry.load(7)

        assert registry.selected_ids == frozenset({1})

    @pytest.mark.asyncio
    async def test_switching_bot_clears_selection(self, registry) -> None:
        await registry.load(7)
        registry.select([1, 2, 3])

        await registry.load(8)

        assert registry.bot_id == 8
        assert registry.selected_ids == frozenset()

    @pytest.mark.asyncio
    async def test_failed_load_empties_list_and_notifies(
        self, registry, backend, notifications
    ) -> None:
        await registry.load(7)
        registry.select([1])
        backend.list_documents.side_effect = DispatchError(provider_name="fake_backend")

        with pytest.raises(LoadError):
            await registry.load(7)

        assert registry.documents == ()
        assert registry.selected_ids == frozenset()
        assert registry.loading is False
        assert notifications.active.message == MSG_LOAD_FAILED
        assert notifications.active.is_error

    @pytest.mark.asyncio
    async def test_refresh_swallows_load_error(self, registry, backend) -> None:
        await registry.load(7)
        backend.list_documents.side_effect = DispatchError()

        assert await registry.refresh() == ()

    @pytest.mark.asyncio
    async def test_refresh_without_bot_is_noop(self, registry, backend) -> None:
        assert await registry.refresh() == ()
        backend.list_documents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_superseded_load_is_discarded(self, registry, backend) -> None:
        release_first = asyncio.Event()
        old_bot_docs = [Document(id=10, title="Old bot")]
        new_bot_docs = [Document(id=20, title="New bot")]

        async def list_documents(bot_id: int) -> list[Document]:
            if bot_id == 7:
                await release_first.wait()
                return old_bot_docs
            return new_bot_docs

        backend.list_documents.side_effect = list_documents

        first = asyncio.create_task(registry.load(7))
        await asyncio.sleep(0)
        await registry.load(8)
        release_first.set()
        await first

        assert registry.bot_id == 8
        assert [d.id for d in registry.documents] == [20]


class TestSelection:
    @pytest.mark.asyncio
    async def test_toggle(self, registry) -> None:
        await registry.load(7)

        assert registry.toggle(2) is True
        assert registry.is_selected(2)
        assert registry.toggle(2) is False
        assert registry.has_selection() is False

    @pytest.mark.asyncio
    async def test_toggle_unknown_id_raises(self, registry) -> None:
        await registry.load(7)
        with pytest.raises(KeyError):
            registry.toggle(99)

    @pytest.mark.asyncio
    async def test_all_selected_tracks_size(self, registry) -> None:
        await registry.load(7)
        registry.select([1, 2, 3])
        assert registry.is_all_selected() is False
        registry.toggle(4)
        assert registry.is_all_selected() is True

    def test_empty_registry_is_never_all_selected(self, registry) -> None:
        assert registry.is_all_selected() is False

    @pytest.mark.asyncio
    async def test_toggle_all(self, registry) -> None:
        await registry.load(7)
        registry.toggle(1)

        registry.toggle_all()
        assert registry.selected_ids == registry.ids

        registry.toggle_all()
        assert registry.selected_ids == frozenset()

    @pytest.mark.asyncio
    async def test_select_rejects_unknown_ids(self, registry) -> None:
        await registry.load(7)
        registry.select([1])
        with pytest.raises(KeyError):
            registry.select([1, 42])
        assert registry.selected_ids == frozenset({1})

    @pytest.mark.asyncio
    async def test_selected_documents_follow_registry_order(self, registry) -> None:
        await registry.load(7)
        registry.select([3, 1])
        assert [d.id for d in registry.selected_documents] == [1, 3]


class TestLoadFromHttpBackend:
    """Document lists the backend returns in imperfect shapes."""

    @staticmethod
    def _registry(settings, notifications, payload) -> DocumentRegistry:
        client = httpx.AsyncClient(
            base_url=settings.backend_base_url,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
        )
        return DocumentRegistry(HttpContentBackend(settings, client=client), notifications)

    @pytest.mark.asyncio
    async def test_null_fields_still_load(self, settings, notifications) -> None:
        registry = self._registry(
            settings,
            notifications,
            {"documents": [{"id": 1, "title": None, "content_type": None}]},
        )

        documents = await registry.load(7)

        assert [doc.id for doc in documents] == [1]
        assert documents[0].label == "Unknown"
        assert registry.loading is False
        assert notifications.active is None

    @pytest.mark.asyncio
    async def test_unreadable_document_fails_the_load(self, settings, notifications) -> None:
        registry = self._registry(
            settings, notifications, {"documents": [{"id": 1}, {"id": "not-a-number"}]}
        )

        with pytest.raises(LoadError):
            await registry.load(7)

        assert registry.documents == ()
        assert registry.loading is False
        assert notifications.active.message == MSG_LOAD_FAILED
        assert notifications.active.is_error
