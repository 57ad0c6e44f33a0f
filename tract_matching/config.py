"""Configuration helpers for the tract matching engine.

Provides YAML loading, nested lookups with defaults, a typed
:class:`MatchConfig`, and root logger set-up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping

import yaml

from tract_matching.matcher import TractDistanceMatcher
from tract_matching.metrics import MetricStrategy, build_metric_set
from tract_matching.resampling import DEFAULT_N_POINTS

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def load_config(path: str | Path) -> Dict[str, Any]:
    """Read a YAML file whose top level must be a mapping; an empty file gives {}."""

    text = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config {path} must contain a mapping at the top level, got {type(data).__name__}.")
    return data


def get_nested(config: Mapping[str, Any], path: str, default: Any) -> Any:
    """Look up a dotted path such as ``"matching.n_points"``; missing or null entries give ``default``."""

    current: Any = config
    for key in path.split("."):
        if not isinstance(current, Mapping) or current.get(key) is None:
            return default
        current = current[key]
    return current


def configure_logging(log_cfg: Mapping[str, Any]) -> None:
    """Configure root logger with a console handler and an optional file handler."""

    level_name = str(log_cfg.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(stream_handler)

    if log_cfg.get("dir"):
        log_dir = Path(str(log_cfg["dir"]))
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / str(log_cfg.get("filename", "matching.log"))
        file_handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)
        root.info("Logging to %s (level=%s)", log_path, level_name)


@dataclass
class MatchConfig:
    """Strongly-typed matching settings; reusable across calls."""

    n_points: int = DEFAULT_N_POINTS
    metrics: List[Any] = field(default_factory=lambda: ["euclidean_mean"])
    n_jobs: int = 1
    validate: bool = False
    logging: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "MatchConfig":
        n_points = int(get_nested(cfg, "matching.n_points", DEFAULT_N_POINTS))
        if n_points < 2:
            raise ValueError(f"matching.n_points must be >= 2, got {n_points}.")
        return cls(
            n_points=n_points,
            metrics=list(get_nested(cfg, "matching.metrics", ["euclidean_mean"])),
            n_jobs=int(get_nested(cfg, "matching.n_jobs", 1)),
            validate=bool(get_nested(cfg, "matching.validate", False)),
            logging=dict(get_nested(cfg, "logging", {})),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "MatchConfig":
        return cls.from_dict(load_config(path))

    def apply_logging(self) -> None:
        """Install the root handlers described by the ``logging`` block."""

        configure_logging(self.logging)

    def build_metrics(self) -> List[MetricStrategy]:
        return build_metric_set(self.metrics)

    def build_matcher(self) -> TractDistanceMatcher:
        """Matcher for these settings; a non-empty ``logging`` block is applied first."""

        if self.logging:
            self.apply_logging()
        return TractDistanceMatcher(
            metrics=self.build_metrics(),
            n_points=self.n_points,
            n_jobs=self.n_jobs,
            validate=self.validate,
        )
