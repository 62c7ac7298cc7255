"""Renderer — plain-text tablature for a solved :class:`TabPath`.

The highest string is printed on top, as guitarists read tab. Each beat is
one column; rests are blank columns; measure breaks become ``|``. Lines are
wrapped so no row exceeds ``width`` characters. An optional playback index
marks one beat with ``▼`` above and ``▲`` below its column.
"""

from __future__ import annotations

from typing import Optional

from src.config import Tuning
from .models import TabPath

PLAYBACK_TOP: str = "▼"
PLAYBACK_BOTTOM: str = "▲"


def render_tab(
    path: TabPath,
    tuning: Tuning,
    width: int = 80,
    padding: int = 2,
    labels: bool = True,
    playback_index: Optional[int] = None,
) -> str:
    """Render *path* as ASCII tab.

    Args:
        path: Solved path (``measure_breaks`` are drawn as bar lines).
        tuning: Tuning used to solve the path; sets the number of strings.
        width: Maximum characters per output line.
        padding: Dashes between consecutive beats.
        labels: Prefix each line with the open-string name.
        playback_index: Beat to mark with playback arrows. An index outside
            the path draws no marker.

    Returns:
        The rendered tab, rows separated by blank lines; empty string when
        the path has no steps.
    """
    if not path.steps:
        return ""

    strings = list(range(len(tuning) - 1, -1, -1))
    names = [tuning.open_pitches[s].name for s in strings]
    label_width = max(len(n) for n in names) + 1 if labels else 0
    spacer = "-" * padding
    breaks = set(path.measure_breaks)

    # (beat index or None for a bar line, one cell per string)
    columns: list[tuple[Optional[int], list[str]]] = []
    for index, step in enumerate(path.steps):
        if index in breaks and index > 0:
            columns.append((None, ["|"] * len(strings)))
        fingering = step.fingering
        frets = {} if fingering is None else {p.string: p.fret for p in fingering.positions}
        cell = max((len(str(f)) for f in frets.values()), default=1)
        columns.append(
            (index, [(str(frets[s]) if s in frets else "").ljust(cell, "-") + spacer for s in strings])
        )
    if len(path.steps) in breaks:
        columns.append((None, ["|"] * len(strings)))

    budget = max(width - label_width - padding, 1)
    rows: list[list[tuple[Optional[int], list[str]]]] = [[]]
    used = 0
    for column in columns:
        size = len(column[1][0])
        if rows[-1] and used + size > budget:
            rows.append([])
            used = 0
        rows[-1].append(column)
        used += size

    blocks: list[str] = []
    for row in rows:
        lines = []
        for k, name in enumerate(names):
            prefix = name.ljust(label_width - 1) + "|" if labels else ""
            lines.append(prefix + spacer + "".join(cells[k] for _, cells in row))
        marker = _marker_offset(row, playback_index)
        if marker is not None:
            offset = label_width + padding + marker
            lines.insert(0, " " * offset + PLAYBACK_TOP)
            lines.append(" " * offset + PLAYBACK_BOTTOM)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def _marker_offset(
    row: list[tuple[Optional[int], list[str]]], playback_index: Optional[int]
) -> Optional[int]:
    """Character offset of the playback beat within *row*, if it is there."""
    if playback_index is None:
        return None
    offset = 0
    for index, cells in row:
        if index == playback_index:
            return offset
        offset += len(cells[0])
    return None
