"""Build immutable road records from plain profile dictionaries.

The dictionaries follow the shapes used when emitting OpenDRIVE:

* polynomial profiles (elevation, superelevation, crossfall, lane offset)
  are lists of ``{"s", "a", "b", "c", "d"}`` entries; lane-relative records
  use ``sOffset`` instead of ``s``;
* planView segments carry ``s``, ``x``, ``y``, ``hdg`` and ``length`` plus
  either ``curvature``, ``curvature_start``/``curvature_end`` (also
  ``curvStart``/``curvEnd``) or a ``type`` of ``"paramPoly3"`` / ``"poly3"``
  with the corresponding coefficients;
* lane sections are ``{"s0", "left", "right"}`` mappings whose lanes hold an
  ``id``, ``width`` records (or a constant width, or absolute ``border``
  records), a ``level`` flag and optional ``height`` records.

Everything the evaluator cannot handle is rejected here with
:class:`RoadBuildError`, so no invalid record ever reaches a query.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from xodrgeom.geometry.variants import GEOMETRY_TYPES, RoadGeometry
from xodrgeom.lanes import HeightOffset, Lane, LaneSection
from xodrgeom.piecewise import PiecewiseMap
from xodrgeom.poly import CubicSpline, Poly3
from xodrgeom.refline import RefLine
from xodrgeom.road import Crossfall, Road, Side

_logger = logging.getLogger(__name__)

ZERO_LENGTH_TOLERANCE = 1e-9


class RoadBuildError(ValueError):
    """Raised for records that must never reach the evaluator."""


def _to_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise RoadBuildError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise RoadBuildError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise RoadBuildError(f"{name} must be finite, got {value!r}")
    return number


def _require(record: Mapping[str, Any], key: str, context: str) -> float:
    if key not in record or record[key] is None:
        raise RoadBuildError(f"{context} is missing '{key}'")
    return _to_float(record[key], f"{context}.{key}")


def _optional(record: Mapping[str, Any], key: str, context: str, default: float = 0.0) -> float:
    value = record.get(key)
    if value is None:
        return default
    return _to_float(value, f"{context}.{key}")


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def build_spline(
    records: Optional[Iterable[Mapping[str, Any]]], s_offset: float = 0.0
) -> CubicSpline:
    if not records:
        return CubicSpline()
    try:
        return CubicSpline.from_records(records, s_offset=s_offset)
    except (TypeError, ValueError) as exc:
        raise RoadBuildError(f"invalid polynomial profile: {exc}") from exc


_PARAM_POLY3_KEYS = (
    ("a_u", "aU"),
    ("b_u", "bU"),
    ("c_u", "cU"),
    ("d_u", "dU"),
    ("a_v", "aV"),
    ("b_v", "bV"),
    ("c_v", "cV"),
    ("d_v", "dV"),
)
_SPIRAL_KEYS = ("curvature_start", "curvature_end", "curvStart", "curvEnd")


def _geometry_params(kind: str, record: Mapping[str, Any], s0: float) -> Tuple[str, Dict[str, Any]]:
    """Resolve the variant name and its type-specific fields."""

    context = "geometry"
    if kind == "paramPoly3":
        params: Dict[str, Any] = {
            name: _optional(record, key, context) for name, key in _PARAM_POLY3_KEYS
        }
        p_range = str(record.get("pRange", "normalized")).strip()
        if p_range not in ("normalized", "arcLength"):
            raise RoadBuildError(f"unsupported pRange: {p_range!r}")
        params["normalized"] = p_range == "normalized"
        return kind, params

    if kind == "poly3":
        return kind, {name: _optional(record, name, context) for name in ("a", "b", "c", "d")}

    if kind == "spiral" or any(key in record for key in _SPIRAL_KEYS):
        default = _optional(record, "curvature", context)
        curv_start = _optional(
            record, "curvature_start", context, _optional(record, "curvStart", context, default)
        )
        curv_end = _optional(
            record, "curvature_end", context, _optional(record, "curvEnd", context, default)
        )
        return "spiral", {"curv_start": curv_start, "curv_end": curv_end}

    curvature = _optional(record, "curvature", context)
    if kind == "arc":
        if abs(curvature) <= 1e-12:
            raise RoadBuildError(f"arc at s={s0} requires a non-zero curvature")
        return kind, {"curvature": curvature}
    if kind not in ("", "line"):
        raise RoadBuildError(f"unsupported geometry type: {kind!r}")
    if abs(curvature) <= 1e-12:
        return "line", {}
    return "arc", {"curvature": curvature}


def build_geometry(record: Mapping[str, Any]) -> RoadGeometry:
    """Turn one planView segment dictionary into a geometry record."""

    context = "geometry"
    s0 = _require(record, "s", context)
    x0 = _require(record, "x", context)
    y0 = _require(record, "y", context)
    hdg = _require(record, "hdg", context)
    length = _require(record, "length", context)
    if length <= 0.0:
        raise RoadBuildError(f"geometry at s={s0} must have a positive length, got {length}")

    kind, params = _geometry_params(str(record.get("type") or "").strip(), record, s0)
    geometry_cls = GEOMETRY_TYPES[kind]
    return geometry_cls(s0=s0, x0=x0, y0=y0, hdg0=hdg, length=length, **params)


def build_ref_line(
    geometry_segments: Sequence[Mapping[str, Any]],
    elevation_profile: Optional[Iterable[Mapping[str, Any]]] = None,
    length: Optional[float] = None,
) -> RefLine:
    geometries: List[RoadGeometry] = []
    for seg in geometry_segments:
        seg_length = seg.get("length")
        if seg_length is not None and abs(_to_float(seg_length, "geometry.length")) <= ZERO_LENGTH_TOLERANCE:
            # ゼロ長の区間は前後のジオメトリと重なるだけなので読み飛ばす
            _logger.debug("skipping zero-length geometry at s=%s", seg.get("s"))
            continue
        geometries.append(build_geometry(seg))

    return RefLine.from_geometries(
        geometries,
        elevation=build_spline(elevation_profile),
        length=length,
    )


def build_crossfall(records: Optional[Iterable[Mapping[str, Any]]]) -> Crossfall:
    if not records:
        return Crossfall()
    records = list(records)
    spline = build_spline(records)
    sides = []
    for record in records:
        try:
            side = Side.parse(record.get("side"))
        except ValueError as exc:
            raise RoadBuildError(str(exc)) from exc
        sides.append((Poly3.from_record(record).s0, side))
    return Crossfall(spline=spline, sides=PiecewiseMap(sides))


def _width_spline(lane: Mapping[str, Any], s0: float, context: str) -> CubicSpline:
    width = lane.get("width")
    if width is None:
        return CubicSpline()
    if isinstance(width, (int, float)) and not isinstance(width, bool):
        return CubicSpline.constant(_to_float(width, f"{context}.width"), s0=s0)
    return build_spline(width, s_offset=s0)


def _height_offsets(lane: Mapping[str, Any], s0: float, context: str) -> PiecewiseMap:
    entries = []
    for record in lane.get("height") or []:
        s_offset = _optional(record, "sOffset", context)
        entries.append(
            (
                s0 + s_offset,
                HeightOffset(
                    inner=_optional(record, "inner", context),
                    outer=_optional(record, "outer", context),
                ),
            )
        )
    return PiecewiseMap(entries)


def _build_side(
    lanes: Iterable[Mapping[str, Any]],
    *,
    left: bool,
    s0: float,
    lane_offset: CubicSpline,
    road_id: str,
) -> List[Lane]:
    ordered = []
    for lane in lanes:
        lane_id = lane.get("id")
        if lane_id is None or isinstance(lane_id, bool):
            raise RoadBuildError(f"lane in section s0={s0} is missing an id")
        try:
            lane_id = int(lane_id)
        except (TypeError, ValueError) as exc:
            raise RoadBuildError(f"invalid lane id: {lane.get('id')!r}") from exc
        if left and lane_id <= 0:
            raise RoadBuildError(f"left lane ids must be positive, got {lane_id}")
        if not left and lane_id >= 0:
            raise RoadBuildError(f"right lane ids must be negative, got {lane_id}")
        ordered.append((abs(lane_id), lane_id, lane))
    ordered.sort(key=lambda item: item[0])

    result: List[Lane] = []
    inner = lane_offset
    for _, lane_id, lane in ordered:
        context = f"lane {lane_id}"
        if lane.get("border"):
            outer = build_spline(lane["border"], s_offset=s0)
        else:
            width = _width_spline(lane, s0, context)
            outer = inner.add(width if left else width.negate())
        result.append(
            Lane(
                id=lane_id,
                inner_border=inner,
                outer_border=outer,
                level=_to_bool(lane.get("level", False)),
                height_offsets=_height_offsets(lane, s0, context),
                type=str(lane.get("type", "driving")),
                section_s0=s0,
                road_id=road_id,
            )
        )
        inner = outer
    return result


def build_lane_section(
    section: Mapping[str, Any],
    lane_offset: Optional[CubicSpline] = None,
    road_id: str = "",
) -> LaneSection:
    """Accumulate lane widths outward from the (offset) centre lane."""

    if "s0" in section:
        s0 = _to_float(section["s0"], "laneSection.s0")
    else:
        s0 = _require(section, "s", "laneSection")
    offset = lane_offset if lane_offset is not None else CubicSpline()

    center_records = section.get("center") or []
    if isinstance(center_records, Mapping):
        center_records = [center_records]
    center_level = any(_to_bool(rec.get("level", False)) for rec in center_records)
    center = Lane(
        id=0,
        inner_border=offset,
        outer_border=offset,
        level=center_level,
        type="none",
        section_s0=s0,
        road_id=road_id,
    )

    left = _build_side(section.get("left") or [], left=True, s0=s0, lane_offset=offset, road_id=road_id)
    right = _build_side(section.get("right") or [], left=False, s0=s0, lane_offset=offset, road_id=road_id)
    return LaneSection(s0=s0, lanes=tuple([center] + left + right), road_id=road_id)


def build_road(
    road_id: Any,
    geometry_segments: Sequence[Mapping[str, Any]],
    *,
    lane_sections: Iterable[Mapping[str, Any]] = (),
    elevation_profile: Optional[Iterable[Mapping[str, Any]]] = None,
    superelevation_profile: Optional[Iterable[Mapping[str, Any]]] = None,
    crossfall_profile: Optional[Iterable[Mapping[str, Any]]] = None,
    lane_offset: Optional[Iterable[Mapping[str, Any]]] = None,
    length: Optional[float] = None,
) -> Road:
    road_key = str(road_id)
    ref_line = build_ref_line(geometry_segments, elevation_profile)
    road_length = ref_line.length if length is None else _to_float(length, "road.length")
    if road_length <= 0.0:
        raise RoadBuildError(f"road #{road_key} must have a positive length")

    offset_spline = build_spline(lane_offset)
    sections: Dict[float, LaneSection] = {}
    for section in lane_sections:
        built = build_lane_section(section, offset_spline, road_key)
        sections[built.s0] = built

    return Road(
        id=road_key,
        length=road_length,
        ref_line=RefLine(
            length=road_length, geometries=ref_line.geometries, elevation=ref_line.elevation
        ),
        superelevation=build_spline(superelevation_profile),
        crossfall=build_crossfall(crossfall_profile),
        lanesections=PiecewiseMap(sections.items()),
    )
