"""Unit tests for FretboardMap."""

import pytest

from src.config import STANDARD_TUNING, Tuning
from src.tab_engine.errors import InvalidConfiguration, UnreachablePitch
from src.tab_engine.fretboard import FretboardMap
from src.tab_engine.models import FretPosition, Pitch


def _p(name: str) -> Pitch:
    return Pitch.parse(name)


def test_lowest_pitch_only_on_open_low_string() -> None:
    board = FretboardMap(STANDARD_TUNING, capo=0, max_fret=12)
    assert board.positions_for(_p("E2")) == {FretPosition(0, 0)}


def test_pitch_on_several_strings() -> None:
    board = FretboardMap(STANDARD_TUNING, capo=0, max_fret=12)
    assert board.positions_for(_p("D3")) == {
        FretPosition(2, 0),
        FretPosition(1, 5),
        FretPosition(0, 10),
    }
    assert board.positions_for(_p("C#4")) == {
        FretPosition(4, 2),
        FretPosition(3, 6),
        FretPosition(2, 11),
    }


def test_few_frets() -> None:
    board = FretboardMap(STANDARD_TUNING, capo=0, max_fret=2)
    assert board.positions_for(_p("E3")) == {FretPosition(2, 2)}


def test_unreachable_pitches_give_empty_set() -> None:
    board = FretboardMap(STANDARD_TUNING, capo=0, max_fret=12)
    assert board.positions_for(_p("D2")) == frozenset()
    assert board.positions_for(_p("F5")) == frozenset()


def test_require_positions_raises_with_beat_index() -> None:
    board = FretboardMap(STANDARD_TUNING, capo=0, max_fret=12)
    with pytest.raises(UnreachablePitch) as info:
        board.require_positions(_p("D2"), beat_index=7)
    assert info.value.beat_index == 7
    assert info.value.pitches == ["D2"]


def test_capo_shifts_open_strings() -> None:
    board = FretboardMap(STANDARD_TUNING, capo=2, max_fret=12)
    assert board.open_pitch(0) == _p("F#2")
    assert board.positions_for(_p("F#2")) == {FretPosition(0, 0)}
    # Below the capo
    assert board.positions_for(_p("E2")) == frozenset()


def test_capo_limits_frets_to_the_physical_neck() -> None:
    board = FretboardMap(Tuning.from_names(["E2"]), capo=2, max_fret=12)
    assert board.positions_for(Pitch(52)) == {FretPosition(0, 10)}
    assert board.positions_for(Pitch(53)) == frozenset()


def test_pitch_at_round_trips() -> None:
    board = FretboardMap(STANDARD_TUNING, capo=3, max_fret=20)
    for midi in range(40, 80):
        for pos in board.positions_for(Pitch(midi)):
            assert board.pitch_at(pos) == Pitch(midi)


@pytest.mark.parametrize("capo, max_fret", [(0, 0), (0, -3), (12, 12), (-1, 12)])
def test_invalid_geometry(capo: int, max_fret: int) -> None:
    with pytest.raises(InvalidConfiguration):
        FretboardMap(STANDARD_TUNING, capo=capo, max_fret=max_fret)
