import asyncio
import logging

import pytest

from conftest import BrokenRepository, RecordingRepository
from src.api.controller import PostController
from src.api.errors import (
    InvalidIdentifierError,
    NotFoundError,
    PaginationError,
    PayloadValidationError,
    StoreError,
)


@pytest.fixture
def repo():
    return RecordingRepository()


@pytest.fixture
def controller(repo):
    return PostController(repo)


def write(controller, title="t", body="b", tags=None):
    return asyncio.run(controller.write({"title": title, "body": body, "tags": tags or []}))


class TestOperations:
    def test_write_then_read(self, controller):
        created = write(controller, "A", "B", ["x"])
        assert asyncio.run(controller.read(created["id"])) == created

    def test_list_reports_last_page_and_truncates(self, controller):
        for i in range(11):
            write(controller, title=f"P{i}", body="w" * 300)
        page = asyncio.run(controller.list("1"))
        assert page.last_page == 2
        assert len(page.items) == 10
        assert all(p["body"] == "w" * 200 + "..." for p in page.items)
        assert [p["title"] for p in asyncio.run(controller.list("2")).items] == ["P0"]

    def test_list_defaults_to_first_page(self, controller):
        write(controller)
        page = asyncio.run(controller.list())
        assert len(page.items) == 1
        assert page.last_page == 1

    def test_update_missing_raises_not_found(self, controller):
        with pytest.raises(NotFoundError):
            asyncio.run(controller.update("a" * 24, {"title": "x"}))

    def test_remove_then_read_not_found(self, controller):
        created = write(controller)
        asyncio.run(controller.remove(created["id"]))
        with pytest.raises(NotFoundError):
            asyncio.run(controller.read(created["id"]))


class TestRejectsBeforeStore:
    def test_invalid_payloads(self, controller, repo):
        with pytest.raises(PayloadValidationError):
            asyncio.run(controller.write({"title": "t"}))
        with pytest.raises(PayloadValidationError):
            asyncio.run(controller.update("a" * 24, {"tags": None}))
        assert repo.calls == []

    def test_invalid_identifier(self, controller, repo):
        for call in (
            lambda: controller.read("nope"),
            lambda: controller.update("nope", {"title": "x"}),
            lambda: controller.remove("nope"),
        ):
            with pytest.raises(InvalidIdentifierError):
                asyncio.run(call())
        assert repo.calls == []

    def test_invalid_page(self, controller, repo):
        with pytest.raises(PaginationError):
            asyncio.run(controller.list("0"))
        assert repo.calls == []


class TestStoreFailures:
    def test_foreign_exceptions_wrapped(self):
        controller = PostController(BrokenRepository())
        with pytest.raises(StoreError) as exc_info:
            asyncio.run(controller.read("a" * 24))
        err = exc_info.value
        assert err.operation == "find_by_id"
        assert isinstance(err.cause, ConnectionError)
        assert isinstance(err.__cause__, ConnectionError)

    def test_store_error_passes_through(self, repo):
        original = StoreError("count", RuntimeError("disk"))

        async def failing_count():
            raise original

        repo.count = failing_count
        with pytest.raises(StoreError) as exc_info:
            asyncio.run(PostController(repo).list())
        assert exc_info.value is original


class TestLogging:
    def test_write_logs_id_not_content(self, controller, caplog):
        with caplog.at_level(logging.INFO, logger="src.api.controller"):
            created = write(controller, title="secret title", body="secret body")
        assert f"post_created: id={created['id']} tags=0" in caplog.text
        assert "secret" not in caplog.text

    def test_update_logs_field_names(self, controller, caplog):
        created = write(controller)
        with caplog.at_level(logging.INFO, logger="src.api.controller"):
            asyncio.run(controller.update(created["id"], {"tags": ["a"], "title": "n"}))
        assert f"post_updated: id={created['id']} fields=tags,title" in caplog.text
