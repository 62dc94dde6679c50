"""Side-channel markers embedded in model replies.

Grammar:

    marker  := "[" NAME ":" " "* payload " "* "]"
    payload := (escape | any char except "]", "\\" and newline)+
    escape  := "\\" any char          e.g. "\\]" for a literal "]"

The assistant appends markers such as ``[ONTHOUD: budget approved]`` to its
reply; we extract the payloads to update local state and strip the markers
before the text is shown to anyone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_ESCAPE_RE = re.compile(r"\\(.)")
_GENERIC_PAYLOAD = r"(?:\\.|[^\]\\\n])+?"


@dataclass(frozen=True)
class Marker:
    name: str
    payload: str = _GENERIC_PAYLOAD
    pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        regex = rf"\[{re.escape(self.name)}:[ \t]*({self.payload})[ \t]*\]"
        object.__setattr__(self, "pattern", re.compile(regex))

    def extract(self, text: str) -> list[str]:
        """Payloads of every occurrence, unescaped, in order of appearance."""
        payloads = (_ESCAPE_RE.sub(r"\1", m.group(1)).strip() for m in self.pattern.finditer(text))
        return [p for p in payloads if p]

    def strip(self, text: str) -> str:
        """Remove every occurrence of this marker and trim the result."""
        return strip_markers(text, self)


MEMORY = Marker("ONTHOUD")
TODO_ADD = Marker("TODO_ADD")
TODO_DONE = Marker("TODO_DONE", payload=r"\d+")


def strip_markers(text: str, *markers: Marker) -> str:
    """Remove all *markers* from *text*.

    Repeats until nothing changes, so removing an inner marker cannot leave a
    new one behind and stripping is idempotent.
    """
    while True:
        stripped = text
        for marker in markers:
            stripped = marker.pattern.sub("", stripped)
        stripped = stripped.strip()
        if stripped == text:
            return stripped
        text = stripped


def escape(payload: str) -> str:
    """Escape a payload so it can be embedded in a marker verbatim."""
    return re.sub(r"([\\\[\]])", r"\\\1", payload)
