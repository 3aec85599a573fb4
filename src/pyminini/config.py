from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_BUFFER_SIZE = 512
MIN_BUFFER_SIZE = 16

_TERMINATORS = {"lf": "\n", "crlf": "\r\n"}


@dataclass(frozen=True)
class IniSettings:
    """Tunables shared by the scanner and the splice engine.

    ``buffer_size`` bounds every line read from or written to a file; a line
    holds at most ``buffer_size - 1`` bytes.  ``line_terminator`` is used for
    every line the engine writes and must end in ``"\\n"``.
    """

    buffer_size: int = DEFAULT_BUFFER_SIZE
    line_terminator: str = "\n"
    encoding: str = "utf-8"
    errors: str = "replace"

    def __post_init__(self) -> None:
        if self.buffer_size < MIN_BUFFER_SIZE:
            raise ValueError(
                f"buffer_size must be at least {MIN_BUFFER_SIZE}, got {self.buffer_size}"
            )
        if self.line_terminator not in _TERMINATORS.values():
            raise ValueError(f"unsupported line terminator {self.line_terminator!r}")

    @property
    def terminator(self) -> bytes:
        return self.line_terminator.encode("ascii")

    def encode(self, text: str) -> bytes:
        return text.encode(self.encoding, self.errors)

    def decode(self, raw: bytes) -> str:
        return raw.decode(self.encoding, self.errors)

    @classmethod
    def from_env(
        cls, prefix: str = "MININI_", environ: Mapping[str, str] | None = None
    ) -> IniSettings:
        """Build settings from ``<prefix>BUFFER_SIZE``, ``<prefix>LINE_TERMINATOR``
        and ``<prefix>ENCODING``; unset variables keep their defaults."""
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}
        raw_size = env.get(f"{prefix}BUFFER_SIZE")
        if raw_size:
            try:
                kwargs["buffer_size"] = int(raw_size)
            except ValueError as exc:
                raise ValueError(f"invalid {prefix}BUFFER_SIZE: {raw_size!r}") from exc
        raw_term = env.get(f"{prefix}LINE_TERMINATOR")
        if raw_term:
            try:
                kwargs["line_terminator"] = _TERMINATORS[raw_term.lower()]
            except KeyError as exc:
                raise ValueError(f"invalid {prefix}LINE_TERMINATOR: {raw_term!r}") from exc
        encoding = env.get(f"{prefix}ENCODING")
        if encoding:
            kwargs["encoding"] = encoding
        return cls(**kwargs)
