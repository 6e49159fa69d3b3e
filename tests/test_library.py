"""Tests for the library command layer: dispatch, clear and bulk loading."""

import json

import pytest

from lending_library.errors import ErrorCode, ErrResult


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


async def all_titles(library) -> list[str]:
    found = []
    for word in ("ruby", "javascript", "scala", "js"):
        result = await library.find_books({"search": word})
        found.extend(b.title for b in result.val)
    return sorted(set(found))


class TestValidationShortCircuit:
    """Invalid requests never reach the store."""

    @pytest.mark.parametrize(
        "change",
        [
            {"isbn": "12-34"},
            {"year": 1200},
            {"authors": []},
            {"pages": "176"},
            {"nCopies": 0},
            {"nCopies": 2.5},
        ],
    )
    async def test_invalid_add_does_not_mutate(self, library, book, change):
        result = await library.add_book({**book, **change})

        assert isinstance(result, ErrResult)
        assert (await library.find_books({"search": "javascript"})).val == []

    async def test_missing_field_does_not_mutate(self, library, book):
        del book["publisher"]

        result = await library.add_book(book)

        assert result.codes == [ErrorCode.MISSING]
        assert (await library.find_books({"search": "javascript"})).val == []

    async def test_invalid_checkout_does_not_mutate(self, loaded_library, book):
        result = await loaded_library.checkout_book({"isbn": book["isbn"], "patronId": ""})

        assert isinstance(result, ErrResult)
        assert (await loaded_library.ledger.live_checkouts(book["isbn"])).val == 0

    async def test_invalid_find(self, loaded_library):
        result = await loaded_library.find_books({"search": "x", "index": -1})

        assert isinstance(result, ErrResult)
        assert {e.path for e in result.errors} == {"search", "index"}


class TestClear:
    """Test clearing the library."""

    async def test_clear_removes_books_and_checkouts(self, loaded_library, book):
        await loaded_library.checkout_book({"isbn": book["isbn"], "patronId": "joe"})

        result = await loaded_library.clear()

        assert result.is_ok
        assert result.val is None
        assert await all_titles(loaded_library) == []
        assert (await loaded_library.ledger.live_checkouts(book["isbn"])).val == 0

    async def test_isbn_reusable_after_clear(self, loaded_library, book):
        await loaded_library.clear()

        result = await loaded_library.add_book({**book, "title": "Another Title"})

        assert result.is_ok
        assert result.val.n_copies == book["nCopies"]

    async def test_clear_empty_library(self, library):
        assert (await library.clear()).is_ok


class TestLoadPaths:
    """Test bulk loading books from JSON files."""

    async def test_load_several_files(self, library, books, tmp_path):
        first = write_json(tmp_path / "first.json", books[:6])
        second = write_json(tmp_path / "second.json", books[6:])

        result = await library.load_paths([first, str(second)])

        assert result.is_ok
        assert result.val is None
        assert await all_titles(library) == sorted(b["title"] for b in books)

    async def test_loading_twice_merges(self, library, books, tmp_path):
        path = write_json(tmp_path / "books.json", books)

        await library.load_paths([path])
        await library.load_paths([path])

        result = await library.find_books({"search": "cookbook"})
        assert [b.n_copies for b in result.val] == [2]

    async def test_missing_file(self, library, tmp_path):
        result = await library.load_paths([tmp_path / "missing.json"])

        assert result.codes == [ErrorCode.BAD_ARG]

    async def test_invalid_json(self, library, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[{", encoding="utf-8")

        result = await library.load_paths([path])

        assert result.codes == [ErrorCode.BAD_REQ]

    async def test_not_utf8(self, library, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'[{"title": "Caf\xe9"}]')

        result = await library.load_paths([path])

        assert result.codes == [ErrorCode.BAD_REQ]

    async def test_not_a_list(self, library, books, tmp_path):
        path = write_json(tmp_path / "one.json", books[0])

        result = await library.load_paths([path])

        assert result.codes == [ErrorCode.BAD_REQ]

    async def test_stops_at_first_bad_book(self, library, books, tmp_path):
        good = write_json(tmp_path / "good.json", books[:2])
        bad_books = [books[2], {**books[3], "year": 3000}, books[4]]
        bad = write_json(tmp_path / "bad.json", bad_books)
        never = write_json(tmp_path / "never.json", books[5:])

        result = await library.load_paths([good, bad, never])

        assert isinstance(result, ErrResult)
        assert result.errors[0].path == "year"
        loaded = await all_titles(library)
        assert loaded == sorted(b["title"] for b in books[:3])
