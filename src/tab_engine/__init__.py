"""Tab Engine — dynamic-programming guitar tablature arranger.

Sub-package containing:
    models        – immutable value types (pitches, beats, fingerings, paths)
    errors        – failure taxonomy
    fretboard     – pitch → (string, fret) lookup
    candidates    – playable fingerings per beat
    cost_model    – configurable difficulty costs
    solver        – Viterbi search over candidate layers
    note_parser   – text notation input
    midi_parser   – MIDI input
    beat_builder  – timed notes → beats
    renderer      – ASCII tab output
    annotate      – orchestrates pipeline and exports results
"""
