"""Cost Model — configurable difficulty costs for guitar fingerings.

All weights come from ``configs/tab_costs.yaml`` (see :mod:`src.config`).
Every method is pure: identical inputs always give identical costs.

Intrinsic (single fingering):
    span_cost         – grows with the stretch between fretted notes
    open_string_cost  – negative bonus per open string
    finger_cost       – per fretted note, reduced for barre shapes,
                        extra for fingers needed beyond four
    intrinsic_cost    – sum of the above

Transition (previous sounded fingering → next fingering):
    movement_cost       – hand shift between anchor frets
    string_change_cost  – strings whose fret assignment changes
    transition_cost     – sum of the above
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from src.config import CostWeights, load_config
from .models import Fingering

# Fingers available to the fretting hand (thumb excluded).
FRETTING_FINGERS: int = 4


class TabCostModel:
    """Rule-based cost model for scoring fingerings and hand movement.

    Args:
        weights: Cost weights. Defaults to :class:`CostWeights` defaults.
    """

    def __init__(self, weights: CostWeights | None = None) -> None:
        self.weights = weights if weights is not None else CostWeights()

    @classmethod
    def from_config(cls, config_path: str | Path | None = None) -> "TabCostModel":
        return cls(load_config(config_path).weights)

    # ── Intrinsic components ──────────────────────────────────

    def span_cost(self, fingering: Fingering) -> float:
        return self.weights.span_weight * fingering.span

    def open_string_cost(self, fingering: Fingering) -> float:
        """Negative cost: open strings need no fretting finger."""
        return -self.weights.open_bonus * fingering.open_count

    def fingers_needed(self, fingering: Fingering) -> int:
        """Fretting fingers required, letting one finger barre the lowest fret.

        A barre only helps when at least two notes sit on the lowest fretted
        fret; those notes then cost a single finger.
        """
        frets = fingering.fretted
        if not frets:
            return 0
        low = min(frets)
        on_low = sum(1 for f in frets if f == low)
        if on_low >= 2:
            return 1 + (len(frets) - on_low)
        return len(frets)

    def finger_cost(self, fingering: Fingering) -> float:
        """Per-fretted-note penalty with barre credit and an over-four surcharge.

        Args:
            fingering: Fingering to score.

        Returns:
            Non-negative cost.
        """
        w = self.weights
        per_note = w.finger_weight
        if fingering.is_barre_eligible:
            per_note *= 1.0 - w.barre_credit
        cost = per_note * fingering.fretted_count

        excess = self.fingers_needed(fingering) - FRETTING_FINGERS
        if excess > 0:
            cost += excess * w.finger_weight
        return cost

    def intrinsic_cost(self, fingering: Fingering) -> float:
        return (
            self.span_cost(fingering)
            + self.open_string_cost(fingering)
            + self.finger_cost(fingering)
        )

    # ── Transition components ─────────────────────────────────

    def movement_cost(self, prev: Fingering, cur: Fingering) -> float:
        """Penalise shifting the hand between anchor frets.

        Args:
            prev: Fingering of the previous sounded beat.
            cur: Fingering of the current beat.

        Returns:
            Non-negative cost proportional to the fret distance.
        """
        return self.weights.move_weight * abs(prev.anchor - cur.anchor)

    def changed_strings(self, prev: Fingering, cur: Fingering) -> int:
        """Count strings that are released, newly played, or re-fretted."""
        strings = {p.string for p in prev.positions} | {p.string for p in cur.positions}
        return sum(1 for s in strings if prev.fret_on(s) != cur.fret_on(s))

    def string_change_cost(self, prev: Fingering, cur: Fingering) -> float:
        return self.weights.string_change_weight * self.changed_strings(prev, cur)

    # ── Aggregate ─────────────────────────────────────────────

    def transition_cost(self, prev: Optional[Fingering], cur: Fingering) -> float:
        """Total cost of moving from *prev* to *cur*.

        ``prev`` is ``None`` at the start of the piece (or after leading
        rests), where no movement is charged.
        """
        if prev is None:
            return 0.0
        return self.movement_cost(prev, cur) + self.string_change_cost(prev, cur)
