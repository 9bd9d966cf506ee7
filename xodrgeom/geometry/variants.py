"""The closed set of planView geometry records."""

from __future__ import annotations

from typing import Dict, Type, Union

from xodrgeom.geometry.arc import Arc
from xodrgeom.geometry.line import Line
from xodrgeom.geometry.param_poly3 import ParamPoly3
from xodrgeom.geometry.poly3 import Poly3Geometry
from xodrgeom.geometry.spiral import Spiral

RoadGeometry = Union[Line, Arc, Spiral, ParamPoly3, Poly3Geometry]

GEOMETRY_TYPES: Dict[str, Type] = {
    cls.kind: cls for cls in (Line, Arc, Spiral, ParamPoly3, Poly3Geometry)
}
