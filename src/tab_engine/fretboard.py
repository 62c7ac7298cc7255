"""Fretboard Map — every (string, fret) that sounds a given pitch.

Frets are counted from the capo: with a capo at fret 2, fret 0 means the
capoed open string. A position exists on string *s* iff
``open(s) + capo + fret == pitch`` and the physical fret ``capo + fret``
does not exceed ``max_fret``.
"""

from __future__ import annotations

from functools import lru_cache

from src.config import Tuning
from .errors import InvalidConfiguration, UnreachablePitch
from .models import FretPosition, Pitch


class FretboardMap:
    """Pitch → positions lookup for one instrument setup.

    Args:
        tuning: Open-string pitches, lowest string first.
        capo: Capo fret (0 for none).
        max_fret: Highest physical fret on the neck.
    """

    def __init__(self, tuning: Tuning, capo: int = 0, max_fret: int = 20) -> None:
        if max_fret <= 0:
            raise InvalidConfiguration(f"max_fret must be positive, got {max_fret}")
        if not 0 <= capo < max_fret:
            raise InvalidConfiguration(f"capo must be in [0, {max_fret}), got {capo}")
        self.tuning = tuning
        self.capo = capo
        self.max_fret = max_fret
        self.playable_frets = max_fret - capo
        self._lookup = lru_cache(maxsize=None)(self._compute_positions)

    @property
    def string_count(self) -> int:
        return len(self.tuning)

    def open_pitch(self, string: int) -> Pitch:
        """Sounding pitch of *string* played at fret 0 (capo included)."""
        return self.tuning.open_pitches[string] + self.capo

    def positions_for(self, pitch: Pitch) -> frozenset[FretPosition]:
        """All positions producing *pitch*; empty when it is out of range."""
        return self._lookup(pitch)

    def require_positions(self, pitch: Pitch, beat_index: int = 0) -> frozenset[FretPosition]:
        positions = self.positions_for(pitch)
        if not positions:
            raise UnreachablePitch(
                beat_index,
                [pitch.name],
                f"Pitch {pitch.name} cannot be played on any string of the configured guitar",
            )
        return positions

    def pitch_at(self, position: FretPosition) -> Pitch:
        """Inverse mapping: the pitch sounded at *position*."""
        return self.open_pitch(position.string) + position.fret

    def _compute_positions(self, pitch: Pitch) -> frozenset[FretPosition]:
        positions = set()
        for string in range(self.string_count):
            fret = pitch.midi - self.open_pitch(string).midi
            if 0 <= fret <= self.playable_frets:
                positions.add(FretPosition(string, fret))
        return frozenset(positions)
