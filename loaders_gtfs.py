# loaders_gtfs.py
import csv, io, math, zipfile
from typing import Dict, Iterable, List, Optional, Set, Tuple
from config import DEFAULT_PRECISION
from logging_config import get_logger
from models import Point
from polyline_utils import encode

logger = get_logger("gtfs")


def load_gtfs_shapes_bytes(zip_bytes: bytes, shape_ids: Optional[Iterable[str]] = None) -> Dict[str, List[Point]]:
    wanted: Optional[Set[str]] = set(shape_ids) if shape_ids is not None else None
    shapes_points: Dict[str, List[Point]] = {}

    with zipfile.ZipFile(io.BytesIO(zip_bytes), 'r') as zf:
        if 'shapes.txt' not in zf.namelist():
            logger.warning("shapes.txt absent du GTFS")
            return shapes_points

        temp: Dict[str, List[Tuple[int, float, float]]] = {}
        skipped = 0
        with zf.open('shapes.txt') as f:
            reader = csv.DictReader(io.TextIOWrapper(f, encoding='utf-8-sig', newline=''))
            for r in reader:
                sid = (r.get('shape_id') or '').strip()
                if not sid or (wanted is not None and sid not in wanted):
                    continue
                try:
                    la = float((r.get('shape_pt_lat') or '').strip())
                    lo = float((r.get('shape_pt_lon') or '').strip())
                    seq = int((r.get('shape_pt_sequence') or '').strip())
                except ValueError:
                    skipped += 1
                    continue
                if not (math.isfinite(la) and math.isfinite(lo)):
                    skipped += 1
                    continue
                temp.setdefault(sid, []).append((seq, la, lo))

        for sid, rows in temp.items():
            rows.sort(key=lambda x: x[0])
            shapes_points[sid] = [Point(la, lo) for _, la, lo in rows]

    if skipped:
        logger.info("shapes.txt: %d ligne(s) ignorée(s)", skipped)
    return shapes_points


def encode_gtfs_shapes(shapes: Dict[str, List[Point]], precision: int = DEFAULT_PRECISION) -> Dict[str, str]:
    return {sid: encode(pts, precision) for sid, pts in shapes.items()}
