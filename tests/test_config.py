from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from xodrgeom.config import DEFAULT_CONFIG, EvaluatorConfig, load_config
from xodrgeom.geometry.spiral import Spiral


def test_defaults():
    config = EvaluatorConfig.from_mapping(None)

    assert config == DEFAULT_CONFIG
    assert config.projection_max_iterations == 50
    assert config.projection_tolerance == 1e-6


def test_load_config_reads_evaluator_section(tmp_path):
    path = tmp_path / "evaluator.yaml"
    path.write_text(
        "evaluator:\n"
        "  projection_max_iterations: 80\n"
        "  projection_tolerance: 1.0e-8\n"
        "  bbox_padding: 0\n"
        "output:\n"
        "  format: xodr\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.projection_max_iterations == 80
    assert isinstance(config.projection_max_iterations, int)
    assert config.projection_tolerance == pytest.approx(1e-8)
    assert config.bbox_padding == 0.0
    assert config.linear_approx_eps == DEFAULT_CONFIG.linear_approx_eps


def test_top_level_settings_are_accepted():
    config = EvaluatorConfig.from_mapping({"linear_approx_eps": "0.05", "unrelated": True})

    assert config.linear_approx_eps == pytest.approx(0.05)


def test_empty_yaml_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == DEFAULT_CONFIG


@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        {"evaluator": 3},
        {"projection_tolerance": "fine"},
        {"projection_max_iterations": True},
        {"projection_tolerance": 0},
        {"projection_scan_samples": -4},
        {"bbox_padding": float("inf")},
        {"projection_max_iterations": float("inf")},
    ],
)
def test_invalid_settings_raise_type_error(data):
    with pytest.raises(TypeError):
        EvaluatorConfig.from_mapping(data)


def test_config_padding_applies_to_spiral_bbox():
    spiral = Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=10.0, curv_start=0.0, curv_end=0.01)

    (xmin, _), _ = spiral.get_bbox(EvaluatorConfig(bbox_padding=0.5))
    (xmin_default, _), _ = spiral.get_bbox()

    assert xmin == pytest.approx(-0.5)
    assert xmin_default == pytest.approx(-DEFAULT_CONFIG.bbox_padding)
