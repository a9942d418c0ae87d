# caching.py
from dataclasses import asdict
from typing import Any, Dict, Tuple
import hashlib
import streamlit as st

from analysis import is_degenerate, out_of_range_indices, summarize_path
from loaders_gtfs import encode_gtfs_shapes, load_gtfs_shapes_bytes
from logging_config import get_logger
from map_view import build_folium_map_for_polyline
from models import Point
from polyline_utils import decode, encode, resolve_precision, sanitize_polyline

logger = get_logger("cache")

PointsKey = Tuple[Tuple[float, float], ...]


def _hash_bytes(b: bytes) -> str:
    return hashlib.md5(b).hexdigest()


def points_key(points) -> PointsKey:
    # clé sans perte : les floats exacts, arrondis une seule fois par scale()
    return tuple(p.as_tuple() for p in points)


def build_decode_view(encoded: str, mode: str, schema: str) -> Dict[str, Any]:
    enc = sanitize_polyline(encoded) or ""
    precision = resolve_precision(enc, mode)
    points = decode(enc, precision)
    logger.info("décodage: %d caractères -> %d points (p%d)", len(enc), len(points), precision)
    return {
        "schema_version": schema,
        "sanitized": enc,
        "precision": precision,
        "points": [[p.latitude, p.longitude] for p in points],
        "stats": asdict(summarize_path(points, enc, precision)),
        "degenerate": is_degenerate(points),
        "out_of_range": out_of_range_indices(points),
    }


def build_encode_view(poly_key: PointsKey, precision: int, schema: str) -> Dict[str, Any]:
    points = [Point(la, lo) for (la, lo) in poly_key]
    enc = encode(points, precision)
    roundtrip = decode(enc, precision)
    return {
        "schema_version": schema,
        "encoded": enc,
        "precision": precision,
        "stats": asdict(summarize_path(points, enc, precision)),
        "roundtrip_ok": all(a.isclose(b, precision) for a, b in zip(points, roundtrip)),
    }


@st.cache_data(show_spinner=False, max_entries=256)
def cache_decode(encoded: str, mode: str, schema: str) -> Dict[str, Any]:
    # les DecodeError ne sont pas mises en cache et remontent à l'appelant
    return build_decode_view(encoded, mode, schema)


@st.cache_data(show_spinner=False, max_entries=256)
def cache_encode(poly_key: PointsKey, precision: int, schema: str) -> Dict[str, Any]:
    return build_encode_view(poly_key, precision, schema)


@st.cache_data(show_spinner=True, ttl=86400, max_entries=8, hash_funcs={bytes: _hash_bytes})
def cache_gtfs_shapes(gtfs_bytes: bytes, precision: int, schema: str) -> Dict[str, Any]:
    shapes = load_gtfs_shapes_bytes(gtfs_bytes)
    encoded = encode_gtfs_shapes(shapes, precision)
    logger.info("GTFS: %d shapes encodées (p%d)", len(encoded), precision)
    return {
        "shapes_plain": {sid: [[p.latitude, p.longitude] for p in pts] for sid, pts in shapes.items()},
        "encoded": encoded,
    }


@st.cache_resource(show_spinner=False)
def resource_build_map_html(label: str, poly_key: PointsKey, compare_key: PointsKey,
                            compare_label: str, schema: str) -> str:
    poly = [Point(la, lo) for (la, lo) in poly_key]
    compare = [Point(la, lo) for (la, lo) in compare_key] if compare_key else None
    fmap = build_folium_map_for_polyline(poly, label=label or None,
                                         compare_points=compare,
                                         compare_label=compare_label or None)
    if fmap is None:
        return "<div>Carte indisponible</div>"
    return fmap.get_root().render()
