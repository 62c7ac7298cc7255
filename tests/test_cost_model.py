"""Unit tests for TabCostModel (default weights unless stated)."""

import pytest

from src.config import CostWeights
from src.tab_engine.cost_model import TabCostModel
from src.tab_engine.errors import InvalidConfiguration
from src.tab_engine.models import Fingering, FretPosition, Pitch

# Standard tuning open pitches, lowest string first.
_OPEN = [40, 45, 50, 55, 59, 64]


def _fingering(*placements: tuple[int, int]) -> Fingering:
    """Build a fingering from (string, fret) pairs on standard tuning."""
    return Fingering(
        tuple((Pitch(_OPEN[s] + f), FretPosition(s, f)) for s, f in placements)
    )


@pytest.fixture
def model() -> TabCostModel:
    return TabCostModel()


def test_open_single_note_is_a_bonus(model: TabCostModel) -> None:
    assert model.intrinsic_cost(_fingering((5, 0))) == pytest.approx(-0.5)


def test_fretted_single_note(model: TabCostModel) -> None:
    assert model.intrinsic_cost(_fingering((4, 1))) == pytest.approx(1.0)


def test_open_chord(model: TabCostModel) -> None:
    c_major = _fingering((1, 3), (2, 2), (3, 0), (4, 1))
    assert model.span_cost(c_major) == pytest.approx(2.0)
    assert model.open_string_cost(c_major) == pytest.approx(-0.5)
    assert model.finger_cost(c_major) == pytest.approx(3.0)
    assert model.intrinsic_cost(c_major) == pytest.approx(4.5)


def test_barre_credit_reduces_per_note_penalty(model: TabCostModel) -> None:
    power = _fingering((0, 5), (1, 5), (2, 5))
    assert model.fingers_needed(power) == 1
    assert model.finger_cost(power) == pytest.approx(1.5)
    assert model.intrinsic_cost(power) == pytest.approx(1.5)


def test_full_barre_chord_needs_four_fingers(model: TabCostModel) -> None:
    f_major = _fingering((0, 1), (1, 3), (2, 3), (3, 2), (4, 1), (5, 1))
    assert model.fingers_needed(f_major) == 4
    assert model.finger_cost(f_major) == pytest.approx(6.0)
    assert model.intrinsic_cost(f_major) == pytest.approx(8.0)


def test_fifth_finger_is_surcharged(model: TabCostModel) -> None:
    stretch = _fingering((0, 1), (1, 2), (2, 3), (3, 4), (4, 2))
    assert model.fingers_needed(stretch) == 5
    assert model.finger_cost(stretch) == pytest.approx(6.0)


def test_span_cost_is_monotonic(model: TabCostModel) -> None:
    costs = [model.intrinsic_cost(_fingering((0, 5), (1, 5 + d))) for d in range(1, 5)]
    assert costs == sorted(costs)
    assert len(set(costs)) == len(costs)


def test_transition_along_one_string(model: TabCostModel) -> None:
    prev = _fingering((4, 3))
    cur = _fingering((4, 5))
    assert model.movement_cost(prev, cur) == pytest.approx(2.0)
    assert model.changed_strings(prev, cur) == 1
    assert model.transition_cost(prev, cur) == pytest.approx(3.0)


def test_transition_to_open_string_uses_open_anchor(model: TabCostModel) -> None:
    prev = _fingering((4, 3))
    cur = _fingering((5, 0))
    assert model.movement_cost(prev, cur) == pytest.approx(3.0)
    assert model.changed_strings(prev, cur) == 2
    assert model.transition_cost(prev, cur) == pytest.approx(5.0)


def test_transition_keeps_held_strings(model: TabCostModel) -> None:
    prev = _fingering((0, 12))
    cur = _fingering((0, 12), (1, 12))
    assert model.changed_strings(prev, cur) == 1
    assert model.transition_cost(prev, cur) == pytest.approx(1.0)


def test_transition_from_nothing_is_free(model: TabCostModel) -> None:
    assert model.transition_cost(None, _fingering((2, 7))) == 0.0


def test_identical_fingerings_cost_nothing_to_repeat(model: TabCostModel) -> None:
    chord = _fingering((1, 3), (2, 2), (3, 0))
    assert model.transition_cost(chord, chord) == 0.0


def test_model_is_pure(model: TabCostModel) -> None:
    a = _fingering((1, 3), (2, 2))
    b = _fingering((3, 7), (4, 8))
    first = (model.intrinsic_cost(a), model.transition_cost(a, b))
    second = (model.intrinsic_cost(a), model.transition_cost(a, b))
    assert first == second


def test_custom_weights() -> None:
    model = TabCostModel(CostWeights(open_bonus=2.0, move_weight=0.0))
    assert model.intrinsic_cost(_fingering((5, 0))) == pytest.approx(-2.0)
    assert model.movement_cost(_fingering((0, 1)), _fingering((0, 12))) == 0.0


def test_from_config_matches_defaults() -> None:
    assert TabCostModel.from_config().weights == CostWeights()


@pytest.mark.parametrize(
    "kwargs",
    [{"span_weight": -1.0}, {"move_weight": -0.1}, {"barre_credit": 1.5}],
)
def test_invalid_weights(kwargs: dict) -> None:
    with pytest.raises(InvalidConfiguration):
        CostWeights(**kwargs)
