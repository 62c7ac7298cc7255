"""End-to-end tests for the annotate pipeline (text and MIDI input)."""

import json
from pathlib import Path

import pretty_midi
import pytest

from src.config import TabConfig
from src.tab_engine.annotate import (
    annotate,
    annotate_all,
    arrange,
    arrangements,
    path_to_json_bytes,
    read_score,
)
from src.tab_engine.errors import NoFeasiblePath
from src.tab_engine.models import Rest, Sounded


def test_annotate_text_writes_outputs(tmp_path: Path) -> None:
    source = tmp_path / "riff.txt"
    source.write_text("C4\nD4\n\nE4\n-\nC3E3G3C4\n", encoding="utf-8")

    path = annotate(source, output_dir=tmp_path / "out")

    assert len(path.steps) == 5
    assert path.measure_breaks == (4,)
    data = json.loads((tmp_path / "out" / "riff_tab.json").read_text(encoding="utf-8"))
    assert data["measure_breaks"] == [4]
    assert [b["rest"] for b in data["beats"]] == [False, False, True, False, False]
    assert len(data["beats"][4]["notes"]) == 4
    tab = (tmp_path / "out" / "riff_tab.txt").read_text(encoding="utf-8")
    assert tab.count("\n") == 6
    assert "|" in tab


def test_annotate_applies_overrides(tmp_path: Path) -> None:
    source = tmp_path / "low.txt"
    source.write_text("D2\n", encoding="utf-8")
    with pytest.raises(NoFeasiblePath):
        annotate(source, output_dir=tmp_path)
    path = annotate(source, output_dir=tmp_path, tuning="drop_d")
    assert path.fingerings[0].positions[0].fret == 0


def test_read_score_from_midi(tmp_path: Path) -> None:
    midi = pretty_midi.PrettyMIDI()
    guitar = pretty_midi.Instrument(program=24)
    guitar.notes.append(pretty_midi.Note(velocity=90, pitch=48, start=0.0, end=0.5))
    guitar.notes.append(pretty_midi.Note(velocity=90, pitch=52, start=0.0, end=0.5))
    guitar.notes.append(pretty_midi.Note(velocity=90, pitch=55, start=1.0, end=1.5))
    drums = pretty_midi.Instrument(program=0, is_drum=True)
    drums.notes.append(pretty_midi.Note(velocity=90, pitch=36, start=0.0, end=0.1))
    midi.instruments.extend([guitar, drums])
    midi_path = tmp_path / "song.mid"
    midi.write(str(midi_path))

    score = read_score(midi_path)
    assert score.beats == (Sounded.of("C3", "E3"), Rest(), Sounded.of("G3"))


def test_read_score_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_score(tmp_path / "nope.txt")
    with pytest.raises(FileNotFoundError):
        read_score(tmp_path / "nope.mid")


def test_arrange_and_json_bytes() -> None:
    path = arrange([Sounded.of("E4"), Rest()], TabConfig(), measure_breaks=[1])
    data = json.loads(path_to_json_bytes(path).decode("utf-8"))
    assert data["beats"][0]["notes"] == [{"pitch": "E4", "midi": 64, "string": 5, "fret": 0}]
    assert data["measure_breaks"] == [1]
    assert data["total_cost"] == pytest.approx(-0.5)


def test_annotate_writes_alternative_arrangements(tmp_path: Path) -> None:
    source = tmp_path / "line.txt"
    source.write_text("C4\nD4\n", encoding="utf-8")

    paths = annotate_all(source, output_dir=tmp_path, num_arrangements=3)

    assert len(paths) == 3
    assert [p.total_cost for p in paths] == sorted(p.total_cost for p in paths)
    data = json.loads((tmp_path / "line_tab.json").read_text(encoding="utf-8"))
    assert data["total_cost"] == pytest.approx(paths[0].total_cost)
    assert [alt["total_cost"] for alt in data["alternatives"]] == pytest.approx(
        [p.total_cost for p in paths[1:]]
    )
    tab = (tmp_path / "line_tab.txt").read_text(encoding="utf-8")
    assert tab.startswith("# Arrangement 1 (cost ")
    assert "# Arrangement 3 (cost " in tab


def test_arrangements_share_measure_breaks() -> None:
    paths = arrangements([Sounded.of("C4"), Sounded.of("D4")], TabConfig(), [1], num_arrangements=2)
    assert [p.measure_breaks for p in paths] == [(1,), (1,)]
    assert "alternatives" not in json.loads(path_to_json_bytes(paths[0]))
