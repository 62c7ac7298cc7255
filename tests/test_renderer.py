"""Tests for ASCII tab rendering."""

from src.config import STANDARD_TUNING
from src.tab_engine.models import (
    Candidate,
    Fingering,
    FretPosition,
    PathStep,
    Pitch,
    Rest,
    Sounded,
    TabPath,
)
from src.tab_engine.renderer import render_tab

_OPEN = [40, 45, 50, 55, 59, 64]


def _step(index: int, *placements: tuple[int, int]) -> PathStep:
    fingering = Fingering(
        tuple((Pitch(_OPEN[s] + f), FretPosition(s, f)) for s, f in placements)
    )
    return PathStep(index, Sounded(fingering.pitches), Candidate(fingering, 1.0))


def test_empty_path_renders_nothing() -> None:
    assert render_tab(TabPath(), STANDARD_TUNING) == ""


def test_single_string_melody_with_rest() -> None:
    path = TabPath(steps=(_step(0, (4, 1)), PathStep(1, Rest()), _step(2, (4, 3))))
    assert render_tab(path, STANDARD_TUNING) == (
        "E4|-----------\n"
        "B3|--1-----3--\n"
        "G3|-----------\n"
        "D3|-----------\n"
        "A2|-----------\n"
        "E2|-----------\n"
    )


def test_chord_and_two_digit_frets() -> None:
    path = TabPath(steps=(_step(0, (0, 12), (1, 12)), _step(1, (0, 0))))
    lines = render_tab(path, STANDARD_TUNING, labels=False).splitlines()
    assert lines[-1] == "--12--0--"
    assert lines[-2] == "--12-----"
    assert lines[0] == "---------"


def test_measure_break_draws_a_bar() -> None:
    path = TabPath(steps=(_step(0, (5, 0)), _step(1, (5, 1))), measure_breaks=(1,))
    lines = render_tab(path, STANDARD_TUNING, labels=False).splitlines()
    assert lines[0] == "--0--|1--"
    assert all(line[5] == "|" for line in lines)


def test_long_paths_wrap() -> None:
    steps = tuple(_step(i, (5, i % 10)) for i in range(30))
    text = render_tab(TabPath(steps=steps), STANDARD_TUNING, width=40)
    blocks = text.rstrip("\n").split("\n\n")
    assert len(blocks) > 1
    assert all(len(line) <= 40 for line in text.splitlines())
    assert all(len(block.splitlines()) == 6 for block in blocks)


def test_playback_marker_points_at_the_beat() -> None:
    path = TabPath(steps=(_step(0, (5, 0)), _step(1, (5, 1)), _step(2, (5, 3))))
    lines = render_tab(path, STANDARD_TUNING, labels=False, playback_index=1).splitlines()
    assert len(lines) == 8
    assert lines[0] == "     ▼"
    assert lines[1] == "--0--1--3--"
    assert lines[-1] == "     ▲"

    labelled = render_tab(path, STANDARD_TUNING, playback_index=0).splitlines()
    assert labelled[0] == "     ▼"
    assert labelled[1][5] == "0"


def test_playback_marker_outside_the_path_is_ignored() -> None:
    path = TabPath(steps=(_step(0, (5, 0)),))
    assert render_tab(path, STANDARD_TUNING, playback_index=4) == render_tab(
        path, STANDARD_TUNING
    )


def test_playback_marker_only_on_its_wrapped_block() -> None:
    steps = tuple(_step(i, (5, i % 10)) for i in range(30))
    blocks = render_tab(TabPath(steps=steps), STANDARD_TUNING, width=40, playback_index=29)
    blocks = blocks.rstrip("\n").split("\n\n")
    assert all("▼" not in block for block in blocks[:-1])
    assert blocks[-1].splitlines()[0].endswith("▼")
    assert len(blocks[-1].splitlines()) == 8
