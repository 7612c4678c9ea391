# src/accesslog/core/logging/template.py
"""
Format-string compiler.

A format string such as

    '{"status":${status},"method":"${method}"}\\n'

is split once, at configuration time, into an immutable sequence of
segments:

    literal '{"status":'   tag 'status'   literal ',"method":"'   tag 'method'   literal '"}\\n'

The render pipeline walks these segments for every request, copying literals
verbatim and asking the tag resolver for everything else.

Parsing is permissive: a `${` without a matching `}` is kept as literal text
up to the end of the string. Compilation never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator

OPEN_DELIMITER = "${"
CLOSE_DELIMITER = "}"


class SegmentKind(str, Enum):
    LITERAL = "literal"
    TAG = "tag"


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    value: str


@dataclass(frozen=True)
class Template:
    """
    Compiled format string. Read-only once built, so one instance can be
    shared by every concurrent request.
    """

    source: str
    segments: tuple[Segment, ...]

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(s.value for s in self.segments if s.kind is SegmentKind.TAG)

    def execute(self, write: Callable[[bytes], object], resolve: Callable[[str], bytes]) -> None:
        """
        Walk the segments, passing literal bytes and resolved tag bytes to `write`.
        Exceptions raised by `resolve` propagate to the caller unchanged.
        """
        for segment in self.segments:
            if segment.kind is SegmentKind.LITERAL:
                write(segment.value.encode("utf-8"))
            else:
                write(resolve(segment.value))


def compile_template(fmt: str) -> Template:
    """
    Parse `fmt` into a Template.

    Args:
        fmt: format string containing `${tag}` placeholders.

    Returns:
        Template: literal and tag segments in source order. Adjacent literal text
        is merged and empty literals are omitted.
    """
    segments: list[Segment] = []
    literal: list[str] = []
    pos = 0

    while True:
        start = fmt.find(OPEN_DELIMITER, pos)
        if start < 0:
            literal.append(fmt[pos:])
            break
        end = fmt.find(CLOSE_DELIMITER, start + len(OPEN_DELIMITER))
        if end < 0:
            # unterminated placeholder: the rest is literal
            literal.append(fmt[pos:])
            break

        literal.append(fmt[pos:start])
        text = "".join(literal)
        if text:
            segments.append(Segment(SegmentKind.LITERAL, text))
        literal = []

        segments.append(Segment(SegmentKind.TAG, fmt[start + len(OPEN_DELIMITER):end]))
        pos = end + len(CLOSE_DELIMITER)

    text = "".join(literal)
    if text:
        segments.append(Segment(SegmentKind.LITERAL, text))

    return Template(source=fmt, segments=tuple(segments))
