# analysis.py
from typing import List, Optional, Sequence
from config import DEGENERATE_SPAN
from models import Bounds, PathStats, Point
from polyline_utils import span, valid_coords


def bounds(points: Sequence[Point]) -> Optional[Bounds]:
    if not points:
        return None
    lats = [p.latitude for p in points]; lons = [p.longitude for p in points]
    return (min(lats), min(lons), max(lats), max(lons))


def is_degenerate(points: Sequence[Point]) -> bool:
    if len(points) < 2: return True
    return span(points) < DEGENERATE_SPAN


def summarize_path(points: Sequence[Point], encoded: str, precision: int) -> PathStats:
    n = len(points)
    return PathStats(
        point_count=n,
        encoded_length=len(encoded),
        precision=precision,
        bounds=bounds(points),
        span=span(points),
        chars_per_point=(len(encoded) / n) if n else 0.0,
        in_range=valid_coords(points),
    )


def out_of_range_indices(points: Sequence[Point]) -> List[int]:
    return [i for i, p in enumerate(points) if not p.in_range()]
