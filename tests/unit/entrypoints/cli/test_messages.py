"""Unit tests for the CLI message emitters.

Glyphs follow the encoding of the *current* stderr stream, and messages are
written to stderr only so stdout stays machine-readable.
"""

import io

import click
import pytest

from streamstore.entrypoints.cli.helpers.messages import (
    CAUTION,
    ERROR,
    SUCCESS,
    error,
    glyph,
    success,
    warn,
)


class FakeTTY(io.StringIO):
    """A text stream with a controllable encoding that claims to be a TTY."""

    def __init__(self, encoding: str):
        super().__init__()
        self._encoding = encoding

    @property
    def encoding(self) -> str:  # type: ignore[override]
        return self._encoding

    def isatty(self) -> bool:
        return True


@pytest.fixture
def stderr(monkeypatch):
    def install(encoding: str) -> FakeTTY:
        stream = FakeTTY(encoding)
        monkeypatch.setattr(click, "get_text_stream", lambda name: stream)
        return stream

    return install


@pytest.mark.parametrize(
    "encoding,index", [("utf-8", 0), ("ascii", 1)], ids=["emoji", "fallback"]
)
def test_glyph_follows_stderr_encoding(stderr, encoding, index):
    stderr(encoding)
    for pair in (CAUTION, SUCCESS, ERROR):
        assert glyph(pair) == pair[index]


@pytest.mark.parametrize(
    "emit,text",
    [(warn, "[!]"), (success, "[OK]"), (error, "[X]")],
    ids=["warn", "success", "error"],
)
def test_messages_go_to_stderr(stderr, capsys, emit, text):
    stderr("ascii")

    emit("hello")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert f"{text}  hello" in captured.err
