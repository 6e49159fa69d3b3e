"""Tests for the lending-library command line."""

import json

import pytest

from lending_library.cli import main, make_request, output
from lending_library.errors import ErrorCode, ErrResult, err_result, ok_result


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Run the CLI from the test directory with logfire off."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LENDING_LIBRARY_LOGFIRE_ENABLED", "false")


@pytest.fixture
def db_url(tmp_path, cli_env) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"


BOOK_ARGS = [
    "isbn=123-456-789-0",
    "title=Dune",
    "authors=[Frank Herbert]",
    "pages=412",
    "year=1965",
    "publisher=Chilton",
]


class TestMakeRequest:
    """Test key=value argument parsing."""

    def test_value_types(self):
        result = make_request(["n=12", "names=[ann, bob smith ,cat]", "s=hello", "z=007", "e="])

        assert result.is_ok
        assert result.val == {
            "n": 12,
            "names": ["ann", "bob smith", "cat"],
            "s": "hello",
            "z": 7,
            "e": "",
        }

    def test_signed_and_decimal_numbers_stay_strings(self):
        result = make_request(["a=-3", "b=2.5"])

        assert result.val == {"a": "-3", "b": "2.5"}

    def test_value_may_contain_equals(self):
        assert make_request(["search=a=b"]).val == {"search": "a=b"}

    @pytest.mark.parametrize("arg", ["noequals", "=value", "bad key=1"])
    def test_malformed_argument(self, arg):
        result = make_request([arg])

        assert isinstance(result, ErrResult)
        assert result.codes == [ErrorCode.BAD_ARG]
        assert arg in result.errors[0].message


class TestOutput:
    """Test result printing and exit status."""

    def test_errors_to_stderr(self, capsys):
        error = err_result("no copies available", ErrorCode.BAD_TYPE, "isbn")
        status = output(error)

        captured = capsys.readouterr()
        assert status == 1
        assert captured.out == ""
        assert captured.err == "BAD_TYPE: no copies available; path=isbn\n"

    def test_void_prints_nothing(self, capsys):
        assert output(ok_result(None)) == 0
        assert capsys.readouterr().out == ""


class TestMain:
    """Test running commands end to end."""

    def test_add_and_find(self, db_url, capsys):
        assert main([db_url, "addBook", *BOOK_ARGS, "nCopies=2"]) == 0
        added = json.loads(capsys.readouterr().out)
        assert added == {
            "isbn": "123-456-789-0",
            "title": "Dune",
            "authors": ["Frank Herbert"],
            "pages": 412,
            "year": 1965,
            "publisher": "Chilton",
            "nCopies": 2,
        }

        assert main([db_url, "findBooks", "search=herbert"]) == 0
        found = json.loads(capsys.readouterr().out)
        assert [b["nCopies"] for b in found] == [2]

    def test_checkout_and_return(self, db_url, capsys):
        main([db_url, "addBook", *BOOK_ARGS])
        capsys.readouterr()

        assert main([db_url, "checkoutBook", "isbn=123-456-789-0", "patronId=joe"]) == 0
        assert main([db_url, "checkoutBook", "isbn=123-456-789-0", "patronId=sue"]) == 1
        assert main([db_url, "returnBook", "isbn=123-456-789-0", "patronId=joe"]) == 0

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err.splitlines() == ["BAD_TYPE: no copies available; path=isbn"]

    def test_validation_errors(self, db_url, capsys):
        status = main([db_url, "addBook", "isbn=12-34", "title=Dune"])

        err_lines = capsys.readouterr().err.splitlines()
        assert status == 1
        assert 'BAD_TYPE: isbn must be of the form "ddd-ddd-ddd-d"; path=isbn' in err_lines
        assert "MISSING: authors is required; path=authors" in err_lines

    def test_load_paths_and_clear(self, db_url, books, tmp_path, capsys):
        path = tmp_path / "books.json"
        path.write_text(json.dumps(books), encoding="utf-8")

        assert main([db_url, "loadPaths", f"books={path}"]) == 0
        assert main([db_url, "findBooks", "search=scala", "count=2"]) == 0
        found = json.loads(capsys.readouterr().out)
        assert [b["title"] for b in found] == ["Functional Programming in Scala", "Programming in Scala"]

        assert main([db_url, "clear"]) == 0
        assert main([db_url, "findBooks", "search=scala"]) == 0
        assert json.loads(capsys.readouterr().out) == []

    def test_numeric_isbn_is_an_integer(self, db_url, capsys):
        assert main([db_url, "checkoutBook", "isbn=123", "patronId=joe"]) == 1

        err_lines = capsys.readouterr().err.splitlines()
        assert "BAD_TYPE: isbn must have type string; path=isbn" in err_lines

    def test_only_the_named_database_is_created(self, db_url, tmp_path):
        assert main([db_url, "clear"]) == 0

        assert not (tmp_path / "data").exists()
        assert (tmp_path / "cli.db").is_file()

    def test_malformed_argument(self, db_url, capsys):
        assert main([db_url, "findBooks", "scala"]) == 1
        assert capsys.readouterr().err.startswith("BAD_ARG: ")

    def test_unknown_command(self, db_url):
        with pytest.raises(SystemExit) as exc_info:
            main([db_url, "renewBook"])

        assert exc_info.value.code == 2
