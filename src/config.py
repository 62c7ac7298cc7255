"""Configuration for Fretboard Architect.

Instrument geometry and cost weights are loaded from
``configs/tab_costs.yaml``. No hardcoded weights: if a required key is
missing from the YAML an :class:`InvalidConfiguration` is raised naming the
key and the file. Validation happens here, before any beat is processed.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

import yaml

from src.tab_engine.errors import InvalidConfiguration
from src.tab_engine.models import Pitch

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parents[1] / "configs" / "tab_costs.yaml"

_REQUIRED_KEYS: list[str] = [
    "tuning",
    "capo",
    "max_fret",
    "max_span",
    "span_tolerance",
    "weights",
]

_WEIGHT_KEYS: list[str] = [
    "span_weight",
    "open_bonus",
    "barre_credit",
    "move_weight",
    "string_change_weight",
    "finger_weight",
]


@dataclass(frozen=True)
class CostWeights:
    """Scalar weights of the difficulty cost model (all non-negative)."""

    span_weight: float = 1.0
    open_bonus: float = 0.5
    barre_credit: float = 0.5
    move_weight: float = 1.0
    string_change_weight: float = 1.0
    finger_weight: float = 1.0

    def __post_init__(self) -> None:
        for key in _WEIGHT_KEYS:
            value = getattr(self, key)
            if value < 0:
                raise InvalidConfiguration(f"Weight '{key}' must be non-negative, got {value}")
        if self.barre_credit > 1:
            raise InvalidConfiguration(
                f"Weight 'barre_credit' must not exceed 1, got {self.barre_credit}"
            )


@dataclass(frozen=True)
class Tuning:
    """Open-string pitches, lowest string first."""

    open_pitches: tuple[Pitch, ...]
    name: str = "custom"

    def __post_init__(self) -> None:
        if not self.open_pitches:
            raise InvalidConfiguration("Tuning must contain at least one string")
        if len(set(self.open_pitches)) != len(self.open_pitches):
            names = ", ".join(p.name for p in self.open_pitches)
            raise InvalidConfiguration(f"Tuning has duplicate strings: {names}")

    @classmethod
    def from_names(cls, names: Sequence[str], name: str = "custom") -> "Tuning":
        try:
            pitches = tuple(Pitch.parse(n) for n in names)
        except ValueError as exc:
            raise InvalidConfiguration(f"Invalid pitch in tuning {list(names)}: {exc}") from exc
        return cls(pitches, name)

    def __len__(self) -> int:
        return len(self.open_pitches)


STANDARD_TUNING = Tuning.from_names(["E2", "A2", "D3", "G3", "B3", "E4"], "standard")


@dataclass(frozen=True)
class TabConfig:
    """Everything the engine needs besides the beats themselves."""

    tuning: Tuning = STANDARD_TUNING
    capo: int = 0
    max_fret: int = 20
    max_span: int = 4
    span_tolerance: int = 2
    max_candidates: int | None = 64
    weights: CostWeights = field(default_factory=CostWeights)

    def __post_init__(self) -> None:
        if self.max_fret <= 0:
            raise InvalidConfiguration(f"max_fret must be positive, got {self.max_fret}")
        if self.capo < 0:
            raise InvalidConfiguration(f"capo must be non-negative, got {self.capo}")
        if self.capo >= self.max_fret:
            raise InvalidConfiguration(
                f"capo ({self.capo}) must sit below max_fret ({self.max_fret})"
            )
        if self.max_span < 0:
            raise InvalidConfiguration(f"max_span must be non-negative, got {self.max_span}")
        if self.span_tolerance < 0:
            raise InvalidConfiguration(
                f"span_tolerance must be non-negative, got {self.span_tolerance}"
            )
        if self.max_candidates is not None and self.max_candidates <= 0:
            raise InvalidConfiguration(
                f"max_candidates must be positive, got {self.max_candidates}"
            )

    def with_overrides(self, **overrides: Any) -> "TabConfig":
        """Return a copy with non-``None`` overrides applied (and re-validated)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes) if changes else self


def resolve_tuning(spec: str | Sequence[str], presets: dict[str, Sequence[str]]) -> Tuning:
    """Turn a preset name or a list of pitch names into a :class:`Tuning`.

    Raises:
        InvalidConfiguration: Unknown preset name or invalid pitch names.
    """
    if isinstance(spec, str):
        key = spec.strip().lower().replace("-", "_").replace(" ", "_")
        if key not in presets:
            known = ", ".join(sorted(presets))
            raise InvalidConfiguration(f"Unknown tuning '{spec}' (known: {known})")
        return Tuning.from_names(presets[key], key)
    return Tuning.from_names(list(spec))


def load_tuning_presets(config_path: str | Path | None = None) -> dict[str, list[str]]:
    cfg = _read_yaml(config_path)
    return {str(k): list(v) for k, v in (cfg.get("tunings") or {}).items()}


def load_config(config_path: str | Path | None = None, **overrides: Any) -> TabConfig:
    """Load and validate the engine configuration.

    Args:
        config_path: Path to the YAML file. Defaults to
            ``configs/tab_costs.yaml`` at the project root.
        **overrides: Top-level fields to replace after loading
            (``tuning`` may be a preset name or list of pitch names).
            ``None`` values are ignored.

    Returns:
        A validated :class:`TabConfig`.

    Raises:
        FileNotFoundError: If the config file does not exist.
        InvalidConfiguration: Missing keys or invalid values.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    cfg = _read_yaml(path)

    for key in _REQUIRED_KEYS:
        if key not in cfg:
            raise InvalidConfiguration(f"Missing required key '{key}' in config: {path}")
    weights_cfg = cfg["weights"] or {}
    for key in _WEIGHT_KEYS:
        if key not in weights_cfg:
            raise InvalidConfiguration(f"Missing required key 'weights.{key}' in config: {path}")

    presets: dict[str, list[str]] = {str(k): list(v) for k, v in (cfg.get("tunings") or {}).items()}

    tuning_spec = overrides.pop("tuning", None)
    if tuning_spec is None:
        tuning_spec = cfg["tuning"]
    tuning = tuning_spec if isinstance(tuning_spec, Tuning) else resolve_tuning(tuning_spec, presets)

    try:
        weights = CostWeights(**{k: float(weights_cfg[k]) for k in _WEIGHT_KEYS})
        max_candidates = cfg.get("max_candidates")
        config = TabConfig(
            tuning=tuning,
            capo=int(cfg["capo"]),
            max_fret=int(cfg["max_fret"]),
            max_span=int(cfg["max_span"]),
            span_tolerance=int(cfg["span_tolerance"]),
            max_candidates=None if max_candidates is None else int(max_candidates),
            weights=weights,
        )
    except InvalidConfiguration:
        raise
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"Malformed value in config {path}: {exc}") from exc

    config = config.with_overrides(**overrides)
    logger.debug(
        "Loaded config from %s: tuning=%s capo=%d max_fret=%d max_span=%d",
        path,
        config.tuning.name,
        config.capo,
        config.max_fret,
        config.max_span,
    )
    return config


def _read_yaml(config_path: str | Path | None) -> dict[str, Any]:
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"Config must be a YAML mapping: {path}")
    return data
