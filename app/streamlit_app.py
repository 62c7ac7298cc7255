"""Fretboard Architect — Streamlit tablature UI.

Minimal interactive application:
    1. Paste text notation or upload a MIDI file (.mid / .midi)
    2. Pick tuning, capo and fret limits
    3. Run the arranger and view the tab plus a per-beat table
    4. Download the solved path as JSON

Constraints:
    - No plotting libraries
    - No audio playback
    - Simple, readable code
"""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

import pandas as pd
import streamlit as st

# Ensure the project root is importable
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from src.config import load_config, load_tuning_presets  # noqa: E402
from src.tab_engine.annotate import arrangements, path_to_json_bytes, read_score  # noqa: E402
from src.tab_engine.errors import (  # noqa: E402
    InvalidConfiguration,
    NoFeasiblePath,
    NoteParseError,
)
from src.tab_engine.note_parser import parse_notes  # noqa: E402
from src.tab_engine.renderer import render_tab  # noqa: E402

_EXAMPLE = "E4\nEb4\nE4\nEb4\nE4\nB3\nD4\nC4\n-\nA2A3\nE3\nA3\n"

# ── Page config ───────────────────────────────────────────────
st.set_page_config(
    page_title="Fretboard Architect",
    page_icon="🎸",
    layout="wide",
)

st.title("🎸 Fretboard Architect")
st.markdown(
    "Enter notes or upload a MIDI file; the dynamic-programming engine picks "
    "the string and fret for every note so the whole piece is easiest to play."
)
st.divider()

# ── Instrument setup ──────────────────────────────────────────
presets = load_tuning_presets()
c1, c2, c3, c4, c5 = st.columns(5)
tuning_name: str = c1.selectbox("Tuning", sorted(presets), index=sorted(presets).index("standard"))
capo: int = c2.number_input("Capo", min_value=0, max_value=12, value=0)
max_fret: int = c3.number_input("Max fret", min_value=1, max_value=30, value=20)
max_span: int = c4.number_input("Max span", min_value=1, max_value=8, value=4)
num_arrangements: int = c5.number_input("Arrangements", min_value=1, max_value=10, value=1)

# ── Input ─────────────────────────────────────────────────────
tab_text, tab_midi = st.tabs(["Text notation", "MIDI upload"])
with tab_text:
    notes_text: str = st.text_area(
        "One beat per line; blank line = rest; '-' = measure break",
        value=_EXAMPLE,
        height=240,
    )
with tab_midi:
    uploaded_file = st.file_uploader("Choose a MIDI file", type=["mid", "midi"])

run_clicked: bool = st.button("▶  Arrange", type="primary")

if run_clicked:
    try:
        config = load_config(tuning=tuning_name, capo=capo, max_fret=max_fret, max_span=max_span)
        if uploaded_file is not None:
            # pretty_midi needs a real file on disk
            with tempfile.NamedTemporaryFile(suffix=".mid", delete=False) as tmp:
                tmp.write(uploaded_file.getvalue())
            score = read_score(tmp.name)
            stem = uploaded_file.name.rsplit(".", 1)[0]
        else:
            score = parse_notes(notes_text)
            stem = "notes"

        with st.spinner("Running DP solver …"):
            paths = arrangements(
                score.beats, config, score.measure_breaks, num_arrangements=num_arrangements
            )
            path = paths[0]
    except (InvalidConfiguration, NoteParseError) as exc:
        st.error(str(exc))
    except NoFeasiblePath as exc:
        st.error("This piece cannot be arranged with the chosen setup.")
        st.dataframe(pd.DataFrame(exc.to_dict()["failures"]), use_container_width=True)
    else:
        # ── Summary stats ─────────────────────────────────────
        st.subheader("Summary")
        m1, m2, m3 = st.columns(3)
        m1.metric("Beats", len(path.steps))
        m2.metric("Total cost", f"{path.total_cost:.2f}")
        m3.metric("Max span", path.max_span)

        st.subheader("Tab")
        st.code(render_tab(path, config.tuning, width=100), language=None)
        for rank, alternative in enumerate(paths[1:], start=2):
            with st.expander(f"Arrangement {rank} (cost {alternative.total_cost:.2f})"):
                st.code(render_tab(alternative, config.tuning, width=100), language=None)

        # ── Per-beat table ────────────────────────────────────
        st.subheader("Fingerings")
        rows = [
            {
                "Beat": step.beat_index + 1,
                "Pitches": " ".join(p.name for p in step.beat.pitches) or "rest",
                "Strings/Frets": ""
                if step.fingering is None
                else " ".join(f"{pos.string + 1}:{pos.fret}" for pos in step.fingering.positions),
                "Cost": None if step.candidate is None else round(step.candidate.cost, 2),
            }
            for step in path.steps
        ]
        st.dataframe(pd.DataFrame(rows), use_container_width=True, height=400)

        # ── Downloads ─────────────────────────────────────────
        st.download_button(
            label="⬇  Download tab.json",
            data=path_to_json_bytes(path, alternatives=paths[1:]),
            file_name=f"{stem}_tab.json",
            mime="application/json",
        )
