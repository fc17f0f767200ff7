"""Integration tests for the chapter pagination endpoints."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


def _paragraph(label: str, words: int) -> str:
    return " ".join(f"{label}{i}" for i in range(words))


# Five 300-word paragraphs: one page each at 500 words per page
CONTENT = "\n\n".join(_paragraph(label, 300) for label in "abcde")


@pytest.fixture
def client():
    """Create a test client with a mocked chapter store."""
    # Import after path is set
    from main import app
    import main

    # Startup is not run outside a ``with`` block, so no real store is created
    client = TestClient(app)
    main.chapter_store = Mock()

    yield client

    main.chapter_store = None


@pytest.fixture
def store(client):
    """The mocked chapter store, preloaded with a five-page chapter."""
    import main
    from models.chapter import Chapter

    chapter = Chapter(
        id=1,
        book_id=1,
        title="Opening",
        chapter_number=1,
        content=CONTENT,
        word_count=1500,
        character_count=len(CONTENT.replace("\n", ""))
    )
    main.chapter_store.fetch_chapter.return_value = chapter
    main.chapter_store.fetch_chapter_content.return_value = CONTENT
    main.chapter_store.persist_chapter_content.side_effect = lambda chapter_id, content: chapter
    return main.chapter_store


class TestHealth:
    """Health check endpoints."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestChapterPages:
    """GET /chapters/{chapter_id}/pages."""

    def test_all_pages(self, client, store):
        response = client.get("/chapters/1/pages", params={"words_per_page": 500})

        assert response.status_code == 200
        data = response.json()
        assert data["chapter"]["id"] == 1
        assert data["chapter"]["total_words"] == 1500
        assert data["pagination"]["total_pages"] == 5
        assert data["pagination"]["words_per_page"] == 500

        pages = data["pagination"]["pages"]
        assert [page["page_number"] for page in pages] == [1, 2, 3, 4, 5]
        assert all(page["word_count"] == 300 for page in pages)
        assert pages[0]["character_count"] == len(pages[0]["content"])
        store.fetch_chapter.assert_called_once_with(1)

    def test_default_words_per_page(self, client, store):
        response = client.get("/chapters/1/pages")

        assert response.status_code == 200
        assert response.json()["pagination"]["words_per_page"] == 2000
        assert response.json()["pagination"]["total_pages"] == 1

    @pytest.mark.parametrize("words_per_page", [0, 100, 499, 5001])
    def test_words_per_page_out_of_range(self, client, store, words_per_page):
        response = client.get("/chapters/1/pages", params={"words_per_page": words_per_page})

        assert response.status_code == 422
        store.fetch_chapter.assert_not_called()

    def test_invalid_chapter_id(self, client, store):
        assert client.get("/chapters/0/pages").status_code == 422

    def test_chapter_not_found(self, client, store):
        from services.chapter_store import ChapterNotFoundError
        store.fetch_chapter.side_effect = ChapterNotFoundError(9)

        response = client.get("/chapters/9/pages")

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    def test_store_failure(self, client, store):
        from services.chapter_store import ChapterStoreError, StoreError
        store.fetch_chapter.side_effect = ChapterStoreError(StoreError(
            code="FETCH_FAILED",
            message="Failed to fetch chapter 1"
        ))

        response = client.get("/chapters/1/pages")

        assert response.status_code == 503
        assert response.json()["detail"]["error"]["code"] == "FETCH_FAILED"

    def test_unexpected_error(self, client, store):
        store.fetch_chapter.side_effect = RuntimeError("unexpected")

        response = client.get("/chapters/1/pages")

        assert response.status_code == 500


class TestPageWindow:
    """GET /chapters/{chapter_id}/pages/{page_number}."""

    def test_interior_page(self, client, store):
        response = client.get("/chapters/1/pages/3", params={"words_per_page": 500})

        assert response.status_code == 200
        data = response.json()
        assert data["current_page"] == 3
        assert data["total_pages"] == 5
        assert data["loaded_pages"] == [2, 3, 4]
        assert [page["page_number"] for page in data["pages"]] == [2, 3, 4]
        assert data["can_go_next"] is True
        assert data["can_go_previous"] is True

    def test_out_of_range_page_is_clamped(self, client, store):
        response = client.get("/chapters/1/pages/42", params={"words_per_page": 500})

        assert response.status_code == 200
        data = response.json()
        assert data["current_page"] == 5
        assert data["loaded_pages"] == [4, 5]
        assert data["can_go_next"] is False

    @pytest.mark.parametrize("page_number", [0, -3])
    def test_page_below_one_is_clamped(self, client, store, page_number):
        response = client.get(f"/chapters/1/pages/{page_number}", params={"words_per_page": 500})

        assert response.status_code == 200
        data = response.json()
        assert data["current_page"] == 1
        assert data["loaded_pages"] == [1, 2]
        assert data["can_go_previous"] is False

    def test_empty_chapter(self, client, store):
        store.fetch_chapter_content.return_value = ""

        response = client.get("/chapters/1/pages/1")

        data = response.json()
        assert data["total_pages"] == 1
        assert data["pages"] == [{"page_number": 1, "content": "", "word_count": 0, "character_count": 0}]


class TestUpdatePage:
    """PUT /chapters/{chapter_id}/pages/{page_number}."""

    def _persisted(self, store):
        chapter_id, persisted = store.persist_chapter_content.call_args[0]
        assert chapter_id == 1
        return persisted

    def _assert_matches_pagination(self, data, persisted, words_per_page):
        from services.paginator import paginate
        expected = paginate(persisted, words_per_page)

        assert data["total_pages"] == len(expected)
        for page in data["pages"]:
            match = expected[page["page_number"] - 1]
            assert page["content"] == match.content
            assert page["word_count"] == match.word_count

    def test_edit_is_persisted(self, client, store):
        response = client.put(
            "/chapters/1/pages/3",
            json={"content": "A short replacement.", "words_per_page": 500}
        )

        assert response.status_code == 200
        persisted = self._persisted(store)
        paragraphs = persisted.split("\n\n")
        assert len(paragraphs) == 5
        assert paragraphs[2] == "A short replacement."
        assert paragraphs[3] == _paragraph("d", 300)

    def test_shrinking_edit_returns_boundaries_of_saved_text(self, client, store):
        """A short page merges into its neighbour once the saved text is paginated."""
        response = client.put(
            "/chapters/1/pages/3",
            json={"content": "A short replacement.", "words_per_page": 500}
        )

        data = response.json()
        persisted = self._persisted(store)
        self._assert_matches_pagination(data, persisted, 500)
        assert data["total_pages"] == 4
        assert data["repaginated"] is True
        assert data["current_page"] == 3
        assert data["pages"][1]["content"].startswith("d0")

    def test_edit_response_matches_next_fetch(self, client, store):
        put_data = client.put(
            "/chapters/1/pages/3",
            json={"content": "A short replacement.", "words_per_page": 500}
        ).json()

        store.fetch_chapter_content.return_value = self._persisted(store)
        get_data = client.get("/chapters/1/pages/3", params={"words_per_page": 500}).json()

        put_data.pop("repaginated")
        get_data.pop("repaginated")
        assert put_data == get_data

    def test_same_size_edit_keeps_boundaries(self, client, store):
        response = client.put(
            "/chapters/1/pages/3",
            json={"content": _paragraph("z", 300), "words_per_page": 500}
        )

        data = response.json()
        self._assert_matches_pagination(data, self._persisted(store), 500)
        assert data["repaginated"] is False
        assert data["total_pages"] == 5
        assert data["pages"][1]["content"] == _paragraph("z", 300)

    def test_oversized_edit_triggers_repagination(self, client, store):
        replacement = _paragraph("x", 250) + "\n\n" + _paragraph("y", 400)

        response = client.put(
            "/chapters/1/pages/3",
            json={"content": replacement, "words_per_page": 500}
        )

        data = response.json()
        self._assert_matches_pagination(data, self._persisted(store), 500)
        assert data["repaginated"] is True
        assert data["total_pages"] == 6
        assert data["current_page"] == 3
        assert data["pages"][1]["content"] == _paragraph("x", 250)

    def test_invalid_body(self, client, store):
        response = client.put("/chapters/1/pages/3", json={"words_per_page": 500})

        assert response.status_code == 422
        store.persist_chapter_content.assert_not_called()

    def test_missing_chapter(self, client, store):
        from services.chapter_store import ChapterNotFoundError
        store.fetch_chapter_content.side_effect = ChapterNotFoundError(1)

        response = client.put("/chapters/1/pages/1", json={"content": "text"})

        assert response.status_code == 404


class TestStatistics:
    """GET /chapters/{chapter_id}/statistics."""

    def test_statistics(self, client, store):
        response = client.get("/chapters/1/statistics")

        assert response.status_code == 200
        data = response.json()
        assert data["word_count"] == 1500
        assert data["paragraph_count"] == 5
        assert data["average_words_per_paragraph"] == 300
        assert data["estimated_reading_time_minutes"] == 8
        assert data["pages_at_default_words"] == 1
