"""Candidate Generator — playable fingerings for one beat.

Pipeline per sounded beat:
    1. look up every pitch on the fretboard (unreachable pitches are
       collected into one :class:`UnreachablePitch`);
    2. cartesian product of the options, keeping only string-disjoint
       assignments whose span fits ``max_span``;
    3. score each survivor with the cost model;
    4. keep the span tolerance band around the narrowest candidate;
    5. drop candidates dominated by a strictly narrower, no-dearer one;
    6. cap the layer at ``max_candidates``.

Output is sorted by :attr:`Candidate.sort_key`, so it is reproducible for
identical input.
"""

from __future__ import annotations

import itertools
import logging

from src.config import TabConfig
from .cost_model import TabCostModel
from .errors import NoPlayableFingering, UnreachablePitch
from .fretboard import FretboardMap
from .models import Beat, Candidate, Fingering, FretPosition, Pitch, Rest

logger = logging.getLogger(__name__)

# Costs closer than this are treated as equal.
_EPSILON: float = 1e-9


class CandidateGenerator:
    """Builds the candidate layer for each beat.

    Args:
        fretboard: Pitch → position lookup.
        cost_model: Scores intrinsic fingering cost.
        max_span: Widest allowed fretted stretch.
        span_tolerance: Width of the band kept above the narrowest span.
        max_candidates: Per-beat cap (``None`` for no cap).
    """

    def __init__(
        self,
        fretboard: FretboardMap,
        cost_model: TabCostModel,
        max_span: int = 4,
        span_tolerance: int = 2,
        max_candidates: int | None = None,
    ) -> None:
        self.fretboard = fretboard
        self.cost_model = cost_model
        self.max_span = max_span
        self.span_tolerance = span_tolerance
        self.max_candidates = max_candidates

    @classmethod
    def from_config(cls, config: TabConfig) -> "CandidateGenerator":
        return cls(
            FretboardMap(config.tuning, config.capo, config.max_fret),
            TabCostModel(config.weights),
            max_span=config.max_span,
            span_tolerance=config.span_tolerance,
            max_candidates=config.max_candidates,
        )

    def candidates_for(self, beat: Beat, beat_index: int = 0) -> list[Candidate]:
        """Return the ordered candidate layer for *beat*.

        Rests have no fingering and yield an empty list.

        Raises:
            UnreachablePitch: A pitch has no position on the neck.
            NoPlayableFingering: No string-disjoint, span-valid assignment.
        """
        if isinstance(beat, Rest):
            return []

        pitches = beat.pitches
        options = self._position_options(pitches, beat_index)
        names = [p.name for p in pitches]

        if len(pitches) > self.fretboard.string_count:
            raise NoPlayableFingering(
                beat_index,
                names,
                f"{len(pitches)} simultaneous pitches but only "
                f"{self.fretboard.string_count} strings",
            )

        fingerings = list(self._assignments(pitches, options))
        if not fingerings:
            raise NoPlayableFingering(
                beat_index,
                names,
                f"No string-disjoint fingering within a span of {self.max_span} frets",
            )

        scored = [Candidate(f, self.cost_model.intrinsic_cost(f)) for f in fingerings]
        kept = self._prune(scored)
        logger.debug(
            "Beat %d %s: %d assignments, %d kept", beat_index, names, len(scored), len(kept)
        )
        if not kept:
            raise NoPlayableFingering(beat_index, names, "Every candidate was pruned")
        return kept

    def _position_options(
        self, pitches: tuple[Pitch, ...], beat_index: int
    ) -> list[list[FretPosition]]:
        options: list[list[FretPosition]] = []
        missing: list[str] = []
        for pitch in pitches:
            try:
                options.append(sorted(self.fretboard.require_positions(pitch, beat_index)))
            except UnreachablePitch as exc:
                missing.extend(exc.pitches)
        if missing:
            raise UnreachablePitch(
                beat_index,
                missing,
                f"Pitch {', '.join(missing)} cannot be played on any string "
                f"of the configured guitar",
            )
        return options

    def _assignments(self, pitches: tuple[Pitch, ...], options: list[list[FretPosition]]):
        for combo in itertools.product(*options):
            strings = {pos.string for pos in combo}
            if len(strings) != len(combo):
                continue
            frets = [pos.fret for pos in combo if pos.fret != 0]
            if frets and max(frets) - min(frets) > self.max_span:
                continue
            yield Fingering(tuple(zip(pitches, combo)))

    def _prune(self, scored: list[Candidate]) -> list[Candidate]:
        if not scored:
            return []
        min_span = min(c.span for c in scored)
        band = [c for c in scored if c.span <= min_span + self.span_tolerance]

        kept = [
            c
            for c in band
            if not any(
                other.span < c.span and other.cost <= c.cost + _EPSILON for other in band
            )
        ]
        kept.sort(key=lambda c: c.sort_key)
        if self.max_candidates is not None:
            kept = kept[: self.max_candidates]
        return kept
