"""Beat Builder — group timed notes into beats.

    - Notes whose onsets fall within ``chord_tolerance`` seconds of the
      first note of a group form one chord.
    - A :class:`Rest` is inserted when silence since every earlier note
      ended lasts at least ``rest_threshold`` seconds.

Deterministic: no randomness, no learned parameters.
"""

from __future__ import annotations

from typing import Any

from .models import Beat, Pitch, Rest, Sounded

# Onsets closer than this are one chord (absorbs MIDI quantisation jitter).
CHORD_TOLERANCE: float = 0.03  # seconds
REST_THRESHOLD: float = 0.25  # seconds


def build_beats(
    notes: list[dict[str, Any]],
    chord_tolerance: float = CHORD_TOLERANCE,
    rest_threshold: float = REST_THRESHOLD,
) -> list[Beat]:
    """Turn a sorted note list into beats.

    Args:
        notes: Notes sorted by ``(start, pitch)`` with at least ``pitch``,
            ``start`` and ``end`` (as returned by
            :func:`midi_parser.extract_notes`).
        chord_tolerance: Onset window for a chord, in seconds.
        rest_threshold: Minimum silent gap that becomes a rest, in seconds.

    Returns:
        Beats in time order.
    """
    if not notes:
        return []

    groups: list[list[dict[str, Any]]] = []
    for note in notes:
        if groups and abs(note["start"] - groups[-1][0]["start"]) <= chord_tolerance:
            groups[-1].append(note)
        else:
            groups.append([note])

    beats: list[Beat] = []
    sounding_until: float | None = None
    for group in groups:
        onset = group[0]["start"]
        if sounding_until is not None and onset - sounding_until >= rest_threshold:
            beats.append(Rest())
        beats.append(Sounded(tuple(Pitch(int(n["pitch"])) for n in group)))
        group_end = max(n["end"] for n in group)
        sounding_until = group_end if sounding_until is None else max(sounding_until, group_end)

    return beats
