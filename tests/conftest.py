"""Shared test fixtures for all test modules."""

from textwrap import dedent

import pytest

from lessonchat.models.document import ChatDocument


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """
    Point HOME at a temporary directory.

    Keeps log files and config lookups from touching the real
    ~/.cache/lessonchat and ~/.config/lessonchat during tests.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "LESSONCHAT_MENTOR_NAME",
        "LESSONCHAT_COURSE_NAME",
        "LESSONCHAT_HISTORY_LIMIT",
        "LESSONCHAT_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def lesson_text():
    """A lesson using every block kind plus an explanation."""
    return dedent(
        """\
        Karan: Welcome to loops!

        Python: Thanks. What is a for loop?
        It looks confusing.

        Karan: It repeats a block for each item.

        Karan: [CALLOUT:💡:Remember]: Always test edge cases

        FREEFORM: [FREEFORM_CANVAS]:{"shapes":[{"type":"rect"}]}
        ---
        Loops iterate over any iterable."""
    )


@pytest.fixture
def three_block_document():
    """Document with three plain messages."""
    return ChatDocument.parse("Ann: one\n\nKaran: two\n\nAnn: three")
