"""Annotator — orchestrate the full tablature pipeline and export results.

Responsibilities:
    1. Read beats from a MIDI file (parser + beat builder) or text notation.
    2. Load and validate the configuration.
    3. Call the DP solver for the cheapest fingering path(s).
    4. Save ``<stem>_tab.json`` and ``<stem>_tab.txt`` (default: ``data/tabs/``).
    5. Return the :class:`TabPath` for programmatic use.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from src.config import TabConfig, load_config
from .beat_builder import build_beats
from .midi_parser import parse_midi
from .models import Beat, TabPath
from .note_parser import ParsedScore, parse_notes
from .renderer import render_tab
from .solver import PathOptimizer

logger = logging.getLogger(__name__)

MIDI_SUFFIXES: tuple[str, ...] = (".mid", ".midi")


def read_score(input_path: str | Path) -> ParsedScore:
    """Read beats from *input_path*: MIDI by extension, text notation otherwise.

    Raises:
        FileNotFoundError: If the file does not exist.
        NoteParseError: If text notation contains non-pitch fragments.
    """
    path = Path(input_path)
    if path.suffix.lower() in MIDI_SUFFIXES:
        return ParsedScore(tuple(build_beats(parse_midi(path))))
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return parse_notes(path.read_text(encoding="utf-8"))


def arrange(
    beats: Iterable[Beat],
    config: TabConfig | None = None,
    measure_breaks: Iterable[int] = (),
    workers: int = 1,
) -> TabPath:
    """Solve *beats* and attach the measure breaks for rendering.

    Raises:
        NoFeasiblePath: If any beat cannot be fingered.
    """
    return arrangements(beats, config, measure_breaks, num_arrangements=1, workers=workers)[0]


def arrangements(
    beats: Iterable[Beat],
    config: TabConfig | None = None,
    measure_breaks: Iterable[int] = (),
    num_arrangements: int = 1,
    workers: int = 1,
) -> list[TabPath]:
    """Solve *beats* for the *num_arrangements* cheapest paths, best first.

    Raises:
        InvalidConfiguration: If *num_arrangements* is below 1.
        NoFeasiblePath: If any beat cannot be fingered.
    """
    optimizer = PathOptimizer.from_config(config or TabConfig(), workers=workers)
    breaks = tuple(measure_breaks)
    return [
        dataclasses.replace(path, measure_breaks=breaks)
        for path in optimizer.solve_arrangements(beats, num_arrangements)
    ]


def annotate(
    input_path: str | Path,
    output_dir: str | Path | None = None,
    config_path: str | Path | None = None,
    config: TabConfig | None = None,
    width: int = 80,
    workers: int = 1,
    num_arrangements: int = 1,
    **overrides: Any,
) -> TabPath:
    """Run the full pipeline and return the best path (see :func:`annotate_all`)."""
    return annotate_all(
        input_path,
        output_dir=output_dir,
        config_path=config_path,
        config=config,
        width=width,
        workers=workers,
        num_arrangements=num_arrangements,
        **overrides,
    )[0]


def annotate_all(
    input_path: str | Path,
    output_dir: str | Path | None = None,
    config_path: str | Path | None = None,
    config: TabConfig | None = None,
    width: int = 80,
    workers: int = 1,
    num_arrangements: int = 1,
    **overrides: Any,
) -> list[TabPath]:
    """Run the full pipeline on a MIDI or text file.

    Args:
        input_path: ``.mid`` / ``.midi`` file or text notation.
        output_dir: Directory for output files.
            Defaults to ``data/tabs/`` relative to the project root.
        config_path: Path to the YAML config.
            Defaults to ``configs/tab_costs.yaml``.
        config: Already loaded configuration; when given, *config_path*
            and *overrides* are ignored.
        width: Line width of the rendered tab.
        workers: Thread-pool size for candidate generation.
        num_arrangements: How many arrangements to write. The runners-up
            follow the best one in the ``.txt`` file and are listed under
            ``alternatives`` in the JSON.
        **overrides: Config fields to override (``tuning``, ``capo``, ...).

    Returns:
        The solved paths, best first.
    """
    input_path = Path(input_path)
    if config is None:
        config = load_config(config_path, **overrides)

    if output_dir is None:
        output_dir = Path(__file__).resolve().parents[2] / "data" / "tabs"
    else:
        output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    # ── Pipeline ──────────────────────────────────────────────
    score = read_score(input_path)
    paths = arrangements(
        score.beats,
        config,
        score.measure_breaks,
        num_arrangements=num_arrangements,
        workers=workers,
    )

    # ── Save outputs ──────────────────────────────────────────
    stem = input_path.stem
    json_path = output_dir / f"{stem}_tab.json"
    json_path.write_bytes(path_to_json_bytes(paths[0], alternatives=paths[1:]))
    tab_path = output_dir / f"{stem}_tab.txt"
    tab_path.write_text(render_arrangements(paths, config, width=width), encoding="utf-8")
    logger.info("Wrote %s and %s", json_path, tab_path)

    return paths


def render_arrangements(paths: Sequence[TabPath], config: TabConfig, width: int = 80) -> str:
    """Render one tab per path; headed by rank and cost when there are several."""
    if len(paths) == 1:
        return render_tab(paths[0], config.tuning, width=width)
    return "\n".join(
        f"# Arrangement {rank} (cost {path.total_cost:.2f})\n"
        + render_tab(path, config.tuning, width=width)
        for rank, path in enumerate(paths, start=1)
    )


def path_to_json_bytes(path: TabPath, alternatives: Sequence[TabPath] = ()) -> bytes:
    """Serialise a path to UTF-8 JSON bytes (for files and download buttons)."""
    data = path.to_dict()
    if alternatives:
        data["alternatives"] = [alt.to_dict() for alt in alternatives]
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")
