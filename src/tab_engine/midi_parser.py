"""MIDI Parser — load notes to be arranged for guitar from a MIDI file.

Responsibilities:
    - Load a MIDI file via *pretty_midi*.
    - Pick the tracks to arrange: guitar programs when the file has any,
      otherwise every pitched (non-drum) track.
    - Return a sorted list of note dictionaries with
      ``pitch``, ``start``, ``end``, ``velocity``.

Grouping notes into beats lives in :mod:`beat_builder`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pretty_midi

logger = logging.getLogger(__name__)

# General MIDI programs 25–32 (0-based 24–31) are guitars.
GUITAR_PROGRAMS: range = range(24, 32)


def load_midi(midi_path: str | Path) -> pretty_midi.PrettyMIDI:
    """Load a MIDI file and return a PrettyMIDI object.

    Raises:
        FileNotFoundError: If *midi_path* does not exist.
        ValueError: If the file cannot be parsed as MIDI.
    """
    path = Path(midi_path)
    if not path.exists():
        raise FileNotFoundError(f"MIDI file not found: {path}")

    try:
        midi_data = pretty_midi.PrettyMIDI(str(path))
    except Exception as exc:
        raise ValueError(f"Failed to parse MIDI file '{path.name}': {exc}") from exc

    return midi_data


def select_instruments(midi_data: pretty_midi.PrettyMIDI) -> list[pretty_midi.Instrument]:
    pitched = [inst for inst in midi_data.instruments if not inst.is_drum]
    guitars = [inst for inst in pitched if inst.program in GUITAR_PROGRAMS]
    if guitars:
        logger.debug("Using %d guitar track(s) of %d", len(guitars), len(pitched))
        return guitars
    return pitched


def extract_notes(midi_data: pretty_midi.PrettyMIDI) -> list[dict[str, Any]]:
    """Extract the notes of the selected tracks.

    Notes are sorted by ``(start, pitch)`` so downstream processing always
    sees the same ordering.

    Returns:
        A list of dicts with ``pitch`` (int), ``start`` (float),
        ``end`` (float) and ``velocity`` (int).
    """
    notes: list[dict[str, Any]] = []
    for instrument in select_instruments(midi_data):
        for note in instrument.notes:
            notes.append(
                {
                    "pitch": note.pitch,
                    "start": round(note.start, 6),
                    "end": round(note.end, 6),
                    "velocity": note.velocity,
                }
            )

    notes.sort(key=lambda n: (n["start"], n["pitch"]))
    return notes


def parse_midi(midi_path: str | Path) -> list[dict[str, Any]]:
    """Convenience wrapper: load MIDI → extract notes."""
    return extract_notes(load_midi(midi_path))
