"""Models — immutable value types shared by every stage of the pipeline.

    Pitch           – a note identity, ordered by MIDI number
    Rest / Sounded  – the two shapes of a beat
    FretPosition    – (string, fret) on the neck
    Fingering       – one FretPosition per pitch of a beat
    Candidate       – a Fingering with its intrinsic cost
    TransitionEdge  – weighted link between candidates of adjacent beats
    PathStep        – the choice made for one beat
    TabPath         – the optimizer's result

String indices are 0-based in tuning order (lowest string first).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

import pretty_midi


_ACCIDENTALS: dict[str, str] = {"♯": "#", "♭": "b"}


@dataclass(frozen=True, order=True)
class Pitch:
    """A single pitch identified by its MIDI note number."""

    midi: int

    @classmethod
    def parse(cls, name: str) -> "Pitch":
        """Build a pitch from scientific notation such as ``"C#4"`` or ``"Bb2"``.

        Raises:
            ValueError: If *name* is not a pitch name.
        """
        text = name.strip()
        for symbol, ascii_symbol in _ACCIDENTALS.items():
            text = text.replace(symbol, ascii_symbol)
        if len(text) < 2:
            raise ValueError(f"Not a pitch name: {name!r}")
        # pretty_midi only accepts an upper-case letter with a lower-case flat
        text = text[0].upper() + text[1:].replace("B", "b")
        return cls(pretty_midi.note_name_to_number(text))

    @property
    def name(self) -> str:
        return pretty_midi.note_number_to_name(self.midi)

    def __add__(self, semitones: int) -> "Pitch":
        return Pitch(self.midi + semitones)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Rest:
    """A beat in which nothing is played."""

    @property
    def pitches(self) -> tuple[Pitch, ...]:
        return ()


@dataclass(frozen=True)
class Sounded:
    """A beat with one or more simultaneous pitches (stored sorted, unique)."""

    pitches: tuple[Pitch, ...]

    def __post_init__(self) -> None:
        unique = tuple(sorted(set(self.pitches)))
        if not unique:
            raise ValueError("A sounded beat needs at least one pitch")
        object.__setattr__(self, "pitches", unique)

    @classmethod
    def of(cls, *names: str) -> "Sounded":
        return cls(tuple(Pitch.parse(n) for n in names))


Beat = Union[Rest, Sounded]


@dataclass(frozen=True, order=True)
class FretPosition:
    string: int
    fret: int

    @property
    def is_open(self) -> bool:
        return self.fret == 0


@dataclass(frozen=True)
class Fingering:
    """Assignment of each pitch of a beat to a distinct string.

    ``placements`` is kept sorted by pitch so two fingerings built from the
    same assignment compare equal.
    """

    placements: tuple[tuple[Pitch, FretPosition], ...]

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.placements))
        strings = [pos.string for _, pos in ordered]
        if len(set(strings)) != len(strings):
            raise ValueError(f"Two pitches share a string: {strings}")
        object.__setattr__(self, "placements", ordered)

    @property
    def pitches(self) -> tuple[Pitch, ...]:
        return tuple(p for p, _ in self.placements)

    @property
    def positions(self) -> tuple[FretPosition, ...]:
        return tuple(pos for _, pos in self.placements)

    @property
    def fretted(self) -> list[int]:
        return [pos.fret for pos in self.positions if not pos.is_open]

    @property
    def min_fret(self) -> Optional[int]:
        frets = self.fretted
        return min(frets) if frets else None

    @property
    def max_fret(self) -> Optional[int]:
        frets = self.fretted
        return max(frets) if frets else None

    @property
    def span(self) -> int:
        frets = self.fretted
        return max(frets) - min(frets) if frets else 0

    @property
    def open_count(self) -> int:
        return sum(1 for pos in self.positions if pos.is_open)

    @property
    def fretted_count(self) -> int:
        return len(self.fretted)

    @property
    def avg_fret(self) -> float:
        frets = self.fretted
        return sum(frets) / len(frets) if frets else 0.0

    @property
    def anchor(self) -> int:
        """Reference hand position: lowest fretted fret, 0 for open position."""
        low = self.min_fret
        return 0 if low is None else low

    @property
    def first_string(self) -> int:
        """String index of the lowest pitch."""
        return self.placements[0][1].string

    @property
    def is_barre_eligible(self) -> bool:
        frets = self.fretted
        return len(frets) >= 2 and len(set(frets)) == 1

    def fret_on(self, string: int) -> Optional[int]:
        for pos in self.positions:
            if pos.string == string:
                return pos.fret
        return None


@dataclass(frozen=True)
class Candidate:
    fingering: Fingering
    cost: float

    @property
    def span(self) -> int:
        return self.fingering.span

    @property
    def avg_fret(self) -> float:
        return self.fingering.avg_fret

    @property
    def first_string(self) -> int:
        return self.fingering.first_string

    @property
    def sort_key(self) -> tuple:
        # Rounded so float noise in summed weights never reorders candidates
        return (
            round(self.cost, 9),
            self.span,
            round(self.avg_fret, 9),
            self.first_string,
            self.fingering.positions,
        )


@dataclass(frozen=True)
class TransitionEdge:
    source: Candidate
    target: Candidate
    cost: float


@dataclass(frozen=True)
class PathStep:
    beat_index: int
    beat: Beat
    candidate: Optional[Candidate] = None

    @property
    def fingering(self) -> Optional[Fingering]:
        return None if self.candidate is None else self.candidate.fingering


@dataclass(frozen=True)
class TabPath:
    """Chosen fingering per beat plus the cumulative cost of the sequence."""

    steps: tuple[PathStep, ...] = ()
    total_cost: float = 0.0
    measure_breaks: tuple[int, ...] = field(default=())

    @property
    def fingerings(self) -> list[Fingering]:
        return [s.fingering for s in self.steps if s.fingering is not None]

    @property
    def max_span(self) -> int:
        return max((f.span for f in self.fingerings), default=0)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation, one entry per beat."""
        beats: list[dict[str, Any]] = []
        for step in self.steps:
            entry: dict[str, Any] = {"beat_index": step.beat_index}
            if step.candidate is None:
                entry["rest"] = True
                entry["notes"] = []
            else:
                entry["rest"] = False
                entry["cost"] = round(step.candidate.cost, 6)
                entry["notes"] = [
                    {"pitch": p.name, "midi": p.midi, "string": pos.string, "fret": pos.fret}
                    for p, pos in step.candidate.fingering.placements
                ]
            beats.append(entry)
        return {
            "total_cost": round(self.total_cost, 6),
            "max_span": self.max_span,
            "measure_breaks": list(self.measure_breaks),
            "beats": beats,
        }
