from __future__ import annotations

import pytest

from pyminini.config import DEFAULT_BUFFER_SIZE, IniSettings


def test_defaults() -> None:
    settings = IniSettings()
    assert settings.buffer_size == DEFAULT_BUFFER_SIZE == 512
    assert settings.terminator == b"\n"
    assert settings.encode("ä") == "ä".encode()
    assert settings.decode(b"\xff") == "\ufffd"


def test_rejects_tiny_buffer() -> None:
    with pytest.raises(ValueError):
        IniSettings(buffer_size=8)


def test_rejects_unknown_terminator() -> None:
    with pytest.raises(ValueError):
        IniSettings(line_terminator="\r")


def test_from_env() -> None:
    settings = IniSettings.from_env(
        environ={
            "MININI_BUFFER_SIZE": "128",
            "MININI_LINE_TERMINATOR": "CRLF",
            "MININI_ENCODING": "latin-1",
        }
    )
    assert settings == IniSettings(buffer_size=128, line_terminator="\r\n", encoding="latin-1")


def test_from_env_reads_os_environ(monkeypatch) -> None:
    monkeypatch.setenv("APP_BUFFER_SIZE", "64")
    monkeypatch.delenv("APP_LINE_TERMINATOR", raising=False)
    monkeypatch.delenv("APP_ENCODING", raising=False)
    assert IniSettings.from_env(prefix="APP_").buffer_size == 64


@pytest.mark.parametrize(
    "environ",
    [{"MININI_BUFFER_SIZE": "big"}, {"MININI_LINE_TERMINATOR": "cr"}],
)
def test_from_env_invalid(environ) -> None:
    with pytest.raises(ValueError):
        IniSettings.from_env(environ=environ)
