# parsers.py
from __future__ import annotations
import json, math, re
from typing import Any, List, Optional, Tuple
from logging_config import get_logger
from models import Point

logger = get_logger("parsers")

_SPLIT_RE = re.compile(r"[,;\s]+")


def detect_coordinates_format(text: str) -> str:
    head = (text or "").lstrip()
    if head.startswith('{') or head.startswith('['):
        return 'json'
    return 'lines'


def _to_float(v) -> Optional[float]:
    try:
        if v is None: return None
        s = str(v).strip()
        if s == "": return None
        x = float(s)
        return x if math.isfinite(x) else None
    except (TypeError, ValueError):
        return None


def _make_point(a: Any, b: Any, order: str) -> Optional[Point]:
    x, y = _to_float(a), _to_float(b)
    if x is None or y is None:
        return None
    return Point.from_lonlat(x, y) if order == "lonlat" else Point(x, y)


# --- JSON : [[lat, lon], ...] ou GeoJSON LineString / Feature
def _geojson_line(obj: Any) -> Optional[List[Any]]:
    if not isinstance(obj, dict):
        return None
    if obj.get('type') == 'Feature':
        return _geojson_line(obj.get('geometry'))
    if obj.get('type') == 'LineString':
        return obj.get('coordinates') or []
    return None


def parse_coordinates_json(obj: Any, order: str = "latlon") -> Tuple[List[Point], List[int]]:
    line = _geojson_line(obj)
    if line is not None:
        order = "lonlat"
        rows = line
    elif isinstance(obj, list):
        rows = obj
    else:
        raise ValueError("JSON attendu : liste de paires ou GeoJSON LineString")

    points: List[Point] = []
    rejected: List[int] = []
    for i, row in enumerate(rows, start=1):
        p = None
        if isinstance(row, (list, tuple)) and len(row) >= 2:
            p = _make_point(row[0], row[1], order)
        elif isinstance(row, dict):
            la = row.get('lat', row.get('latitude'))
            lo = row.get('lon', row.get('lng', row.get('longitude')))
            p = _make_point(la, lo, "latlon")
        if p is None:
            rejected.append(i)
            continue
        points.append(p)
    return points, rejected


# --- Texte : une paire par ligne
def parse_coordinates_lines(text: str, order: str = "latlon") -> Tuple[List[Point], List[int]]:
    points: List[Point] = []
    rejected: List[int] = []
    for lineno, raw in enumerate((text or "").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        parts = [x for x in _SPLIT_RE.split(line) if x]
        p = _make_point(parts[0], parts[1], order) if len(parts) == 2 else None
        if p is None:
            rejected.append(lineno)
            continue
        points.append(p)
    return points, rejected


def parse_coordinates_text(text: str, order: str = "latlon") -> Tuple[List[Point], List[int]]:
    if order not in ("latlon", "lonlat"):
        raise ValueError(f"ordre inconnu: {order!r}")
    if detect_coordinates_format(text) == 'json':
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"JSON invalide (ligne {e.lineno}, colonne {e.colno})") from e
        points, rejected = parse_coordinates_json(obj, order)
    else:
        points, rejected = parse_coordinates_lines(text, order)
    if rejected:
        logger.info("%d entrée(s) ignorée(s): %s", len(rejected), rejected[:20])
    return points, rejected
