"""Fretboard Architect — command-line entry point.

Reads a MIDI file or text notation, arranges it for guitar and prints the
tab. The Streamlit app lives in ``app/streamlit_app.py``.
"""

from __future__ import annotations

import json
import logging
import sys

import click

from src.config import DEFAULT_CONFIG_PATH, load_config
from src.tab_engine.annotate import annotate_all
from src.tab_engine.errors import InvalidConfiguration, NoFeasiblePath, NoteParseError
from src.tab_engine.renderer import render_tab

__version__ = "0.1.0"


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="fretboard-architect")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help=f"Cost/tuning YAML. Defaults to {DEFAULT_CONFIG_PATH.name}.",
)
@click.option("--tuning", default=None, help="Tuning preset name (e.g. standard, drop_d).")
@click.option("--capo", type=click.IntRange(0, 24), default=None, help="Capo fret.")
@click.option("--max-fret", type=click.IntRange(1, 30), default=None, help="Highest usable fret.")
@click.option("--max-span", type=click.IntRange(0, 12), default=None, help="Widest fret stretch.")
@click.option(
    "--output-dir",
    "-o",
    default=None,
    metavar="DIR",
    help="Where to write <name>_tab.json and <name>_tab.txt. Defaults to data/tabs/.",
)
@click.option("--width", type=click.IntRange(20, 400), default=80, show_default=True)
@click.option("--workers", type=click.IntRange(1, 64), default=1, show_default=True,
              help="Threads used to build candidate fingerings.")
@click.option("--arrangements", "-n", "num_arrangements", type=click.IntRange(1, 50), default=1,
              show_default=True, help="How many of the cheapest arrangements to print.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(
    input_path: str,
    config_path: str | None,
    tuning: str | None,
    capo: int | None,
    max_fret: int | None,
    max_span: int | None,
    output_dir: str | None,
    width: int,
    workers: int,
    num_arrangements: int,
    verbose: bool,
) -> None:
    """Arrange INPUT_PATH (MIDI or text notation) as guitar tablature."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(
            config_path, tuning=tuning, capo=capo, max_fret=max_fret, max_span=max_span
        )
        paths = annotate_all(
            input_path,
            output_dir=output_dir,
            config=config,
            width=width,
            workers=workers,
            num_arrangements=num_arrangements,
        )
    except (InvalidConfiguration, NoteParseError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)
    except NoFeasiblePath as exc:
        click.echo("Error: the piece cannot be arranged with this setup.", err=True)
        click.echo(json.dumps(exc.to_dict(), indent=2), err=True)
        sys.exit(1)

    for rank, path in enumerate(paths, start=1):
        if len(paths) > 1:
            click.echo(f"Arrangement {rank}")
        click.echo(render_tab(path, config.tuning, width=width), nl=False)
        click.echo(f"Total cost: {path.total_cost:.2f}   Max span: {path.max_span}")


if __name__ == "__main__":
    main()
