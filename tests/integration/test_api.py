"""Integration tests for the FastAPI endpoints using TestClient."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from booksearch.config.settings import Settings
from booksearch.main import create_app
from booksearch.models.book import ParagraphDocument
from booksearch.models.ingestion import FileIngestionResult, IngestionReport
from booksearch.models.query import QueryResult, SearchHit
from booksearch.services.library_service import LibraryService
from booksearch.utils.errors import InvalidStoreResponse, StoreUnreachable


def _query_result(*locations: int) -> QueryResult:
    hits = [
        SearchHit(
            id=str(loc),
            score=1.0,
            document=ParagraphDocument(author="Herman Melville", title="Moby Dick", location=loc, text=f"p{loc}"),
        )
        for loc in locations
    ]
    return QueryResult(total=len(hits), hits=hits)


@pytest.fixture
def library() -> MagicMock:
    service = MagicMock(spec=LibraryService)
    service.check_health = AsyncMock(return_value=True)
    service.search_by_term = AsyncMock(return_value=_query_result(3))
    service.get_paragraph_range = AsyncMock(return_value=_query_result(10, 11, 12, 13, 14))
    service.trigger_reload = AsyncMock(
        return_value=IngestionReport(
            index="library",
            files_discovered=1,
            file_results=[
                FileIngestionResult(file="books/moby.txt", title="Moby Dick", paragraphs=5, documents_indexed=5)
            ],
        )
    )
    return service


@pytest.fixture
def client(library: MagicMock) -> TestClient:
    app = create_app(settings=Settings(_env_file=None), library_service=library)
    return TestClient(app)


class TestHealth:
    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_unhealthy(self, client: TestClient, library: MagicMock) -> None:
        library.check_health.return_value = False
        response = client.get("/health")
        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "error" in body


class TestLoadData:
    def test_success_returns_summary(self, client: TestClient) -> None:
        response = client.get("/load-data")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["summary"]["documents_indexed"] == 5
        assert body["report"]["file_results"][0]["title"] == "Moby Dick"

    def test_fatal_failure(self, client: TestClient, library: MagicMock) -> None:
        library.trigger_reload.side_effect = StoreUnreachable("cluster down", provider_name="elasticsearch")
        response = client.get("/load-data")
        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "cluster down", "summary": {}}


class TestSearch:
    def test_search(self, client: TestClient, library: MagicMock) -> None:
        response = client.get("/search", params={"term": "whale", "offset": 9})
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["hits"][0]["document"]["location"] == 3
        library.search_by_term.assert_awaited_once_with("whale", 9)

    def test_offset_defaults_to_zero(self, client: TestClient, library: MagicMock) -> None:
        client.get("/search", params={"term": "whale"})
        library.search_by_term.assert_awaited_once_with("whale", 0)

    @pytest.mark.parametrize(
        "params",
        [
            {},
            {"term": ""},
            {"term": "   "},
            {"term": "x" * 61},
            {"term": "whale", "offset": -1},
            {"term": "whale", "offset": "a"},
        ],
    )
    def test_invalid_input(self, client: TestClient, library: MagicMock, params: dict) -> None:
        assert client.get("/search", params=params).status_code == 422
        library.search_by_term.assert_not_awaited()

    def test_store_error_is_json_500(self, client: TestClient, library: MagicMock) -> None:
        library.search_by_term.side_effect = InvalidStoreResponse("no hits", provider_name="elasticsearch")
        response = client.get("/search", params={"term": "whale"})
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "InvalidStoreResponse", "detail": "no hits"}


class TestParagraphs:
    def test_range(self, client: TestClient, library: MagicMock) -> None:
        response = client.get("/paragraphs", params={"bookTitle": "Moby Dick", "start": 10, "end": 15})
        assert response.status_code == 200
        assert [h["document"]["location"] for h in response.json()["hits"]] == [10, 11, 12, 13, 14]
        library.get_paragraph_range.assert_awaited_once_with("Moby Dick", 10, 15)

    def test_defaults(self, client: TestClient, library: MagicMock) -> None:
        client.get("/paragraphs", params={"bookTitle": "Moby Dick"})
        library.get_paragraph_range.assert_awaited_once_with("Moby Dick", 0, 10)

    @pytest.mark.parametrize(
        "params",
        [
            {},
            {"bookTitle": "x" * 257},
            {"bookTitle": "Moby Dick", "start": -1},
            {"bookTitle": "Moby Dick", "start": 5, "end": 5},
            {"bookTitle": "Moby Dick", "start": 20},
        ],
    )
    def test_invalid_input(self, client: TestClient, library: MagicMock, params: dict) -> None:
        assert client.get("/paragraphs", params=params).status_code == 422
        library.get_paragraph_range.assert_not_awaited()


class TestLifespan:
    def test_injected_service_is_kept(self, library: MagicMock) -> None:
        app = create_app(settings=Settings(_env_file=None), library_service=library)
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
        assert app.state.library_service is library


class TestRequestId:
    def test_generated_when_absent(self, client: TestClient) -> None:
        response = client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 32

    def test_incoming_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"
