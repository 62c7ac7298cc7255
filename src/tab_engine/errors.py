"""Errors — failure taxonomy for the tablature engine.

Hierarchy:
    TabEngineError
      ├── InvalidConfiguration   – malformed tuning / weights, raised at setup
      ├── NoteParseError         – unreadable text notation
      ├── BeatError              – a single beat cannot be fingered
      │     ├── UnreachablePitch
      │     └── NoPlayableFingering
      └── NoFeasiblePath         – the optimizer could not build a path

Per-beat errors are collected by the solver and handed back together inside
:class:`NoFeasiblePath`, so a caller sees every problematic beat at once.
"""

from __future__ import annotations

from typing import Any, Sequence


class TabEngineError(Exception):
    """Base class for every error raised by the tablature engine."""


class InvalidConfiguration(TabEngineError, ValueError):
    """Tuning, fret range or cost weights are unusable."""


class NoteParseError(TabEngineError, ValueError):
    """Text notation contains fragments that are not pitches.

    Args:
        problems: One message per unparsable fragment.
    """

    def __init__(self, problems: Sequence[str]) -> None:
        self.problems: list[str] = list(problems)
        super().__init__("\n".join(self.problems))


class BeatError(TabEngineError):
    """A single beat that cannot be turned into a fingering.

    Args:
        beat_index: Position of the beat in the piece (0-based).
        pitches: Names of the pitches involved.
        reason: Human-readable explanation.
    """

    kind: str = "beat_error"

    def __init__(self, beat_index: int, pitches: Sequence[str], reason: str) -> None:
        self.beat_index = beat_index
        self.pitches: list[str] = list(pitches)
        self.reason = reason
        super().__init__(f"Beat {beat_index + 1}: {reason}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "beat_index": self.beat_index,
            "pitches": self.pitches,
            "reason": self.reason,
        }


class UnreachablePitch(BeatError):
    """A pitch has no string/fret position on the configured instrument."""

    kind = "unreachable_pitch"


class NoPlayableFingering(BeatError):
    """Every assignment for a chord shares a string or stretches too far."""

    kind = "no_playable_fingering"


class NoFeasiblePath(TabEngineError):
    """At least one beat has no candidates, so no complete path exists.

    Args:
        failures: Every per-beat error found in the piece, in beat order.
    """

    def __init__(self, failures: Sequence[BeatError]) -> None:
        self.failures: list[BeatError] = sorted(failures, key=lambda f: f.beat_index)
        lines = [str(f) for f in self.failures]
        super().__init__(
            f"No feasible path: {len(self.failures)} unplayable beat(s)\n" + "\n".join(lines)
        )

    @property
    def beat_indices(self) -> list[int]:
        return sorted({f.beat_index for f in self.failures})

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "no_feasible_path",
            "failures": [f.to_dict() for f in self.failures],
        }
