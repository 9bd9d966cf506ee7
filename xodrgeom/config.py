"""Tunable numerical settings for the evaluator."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

PROJECTION_MAX_ITERATIONS = 50
PROJECTION_TOLERANCE = 1e-6
PROJECTION_SCAN_SAMPLES = 64
BBOX_PADDING = 1e-6
LINEAR_APPROX_EPS = 0.1


@dataclass(frozen=True)
class EvaluatorConfig:
    projection_max_iterations: int = PROJECTION_MAX_ITERATIONS
    projection_tolerance: float = PROJECTION_TOLERANCE
    projection_scan_samples: int = PROJECTION_SCAN_SAMPLES
    bbox_padding: float = BBOX_PADDING
    linear_approx_eps: float = LINEAR_APPROX_EPS

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "EvaluatorConfig":
        """Build a configuration from a parsed YAML document.

        The settings may live at the top level or below an ``evaluator``
        key.  Unknown keys are ignored so a shared project configuration can
        carry unrelated sections.
        """

        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise TypeError("configuration must be a mapping if provided")

        section = data.get("evaluator", data)
        if section is None:
            return cls()
        if not isinstance(section, Mapping):
            raise TypeError("evaluator configuration must be a mapping if provided")

        overrides = {}
        for field in fields(cls):
            if field.name not in section:
                continue
            raw = section[field.name]
            if isinstance(raw, bool):
                raise TypeError(f"evaluator.{field.name} must be a number")
            try:
                if field.type in (int, "int"):
                    value: Union[int, float] = int(raw)
                else:
                    value = float(raw)
            except (TypeError, ValueError, OverflowError) as exc:
                raise TypeError(f"evaluator.{field.name} must be a number") from exc
            if not math.isfinite(value) or value < 0 or (value == 0 and field.name != "bbox_padding"):
                raise TypeError(f"evaluator.{field.name} must be a positive number")
            overrides[field.name] = value

        return replace(cls(), **overrides)


DEFAULT_CONFIG = EvaluatorConfig()


def load_config(path: Union[str, Path]) -> EvaluatorConfig:
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    return EvaluatorConfig.from_mapping(data)
