"""Note Parser — read beats from plain-text pitch notation.

Format, one beat per line::

    E2            single note
    G#2A4 E3      chord (pitches may be run together or spaced)
                  blank line: rest
    ---           measure break (any run of -, – or —)
    A3 // text    everything after // is a comment

Unparsable fragments are collected across the whole input and reported
together in one :class:`NoteParseError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import NoteParseError
from .models import Beat, Pitch, Rest, Sounded

_PITCH_RE = re.compile(r"[A-G][#♯b♭]?-?\d", re.IGNORECASE)
_MEASURE_CHARS: tuple[str, ...] = ("-", "–", "—")


@dataclass(frozen=True)
class ParsedScore:
    """Beats in order plus the beat indices at which a new measure starts."""

    beats: tuple[Beat, ...]
    measure_breaks: tuple[int, ...] = ()


def parse_notes(text: str) -> ParsedScore:
    """Parse text notation into beats.

    Args:
        text: The full notation, newline separated.

    Returns:
        A :class:`ParsedScore`.

    Raises:
        NoteParseError: One message per unparsable fragment, in line order.
    """
    beats: list[Beat] = []
    breaks: list[int] = []
    problems: list[str] = []

    for line_number, raw in enumerate(text.splitlines(), start=1):
        content = "".join(raw.split("//", 1)[0].split())
        if not content:
            beats.append(Rest())
        elif _is_measure_break(content):
            breaks.append(len(beats))
        else:
            pitches, bad = _parse_pitches(content)
            problems.extend(
                f"Input '{fragment}' on line {line_number} could not be parsed into a pitch."
                for fragment in bad
            )
            if pitches and not bad:
                beats.append(Sounded(tuple(pitches)))

    if problems:
        raise NoteParseError(problems)
    return ParsedScore(tuple(beats), tuple(breaks))


def _is_measure_break(content: str) -> bool:
    return any(set(content) == {ch} for ch in _MEASURE_CHARS)


def _parse_pitches(content: str) -> tuple[list[Pitch], list[str]]:
    """Split *content* into pitches and the leftover fragments between them."""
    pitches: list[Pitch] = []
    bad: list[str] = []
    cursor = 0
    for match in _PITCH_RE.finditer(content):
        if match.start() > cursor:
            bad.append(content[cursor : match.start()])
        try:
            pitches.append(Pitch.parse(match.group()))
        except ValueError:
            bad.append(match.group())
        cursor = match.end()
    if cursor < len(content):
        bad.append(content[cursor:])
    return pitches, bad
