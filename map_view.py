# map_view.py
from typing import List, Optional, Sequence, Tuple
import folium

from config import COLOR_COMPARE, COLOR_PATH, DEFAULT_CENTER, DEFAULT_ZOOM
from models import Point


def _valid_latlons(points: Optional[Sequence[Point]]) -> List[Tuple[float, float]]:
    return [p.as_tuple() for p in (points or []) if p.in_range()]


def build_folium_map_for_polyline(
    points: Sequence[Point],
    label: Optional[str] = None,
    compare_points: Optional[Sequence[Point]] = None,
    compare_label: Optional[str] = None,
    center: Tuple[float, float] = DEFAULT_CENTER,
    zoom_start: int = DEFAULT_ZOOM
):
    latlons_poly = _valid_latlons(points)
    if len(latlons_poly) < 2:
        return None

    m = folium.Map(location=center, zoom_start=zoom_start, tiles="OpenStreetMap", control_scale=True)

    # Tracé (rouge)
    folium.PolyLine(latlons_poly, color=COLOR_PATH, weight=5, opacity=0.9,
                    tooltip=f"Polyline : {label or 'n/a'} ({len(latlons_poly)} pts)").add_to(m)
    folium.CircleMarker(latlons_poly[0], radius=6, color="green", fill=True, fill_opacity=0.9,
                        tooltip="Départ").add_to(m)
    folium.CircleMarker(latlons_poly[-1], radius=6, color="red", fill=True, fill_opacity=0.9,
                        tooltip="Arrivée").add_to(m)

    # Tracé de comparaison (vert)
    latlons_cmp = _valid_latlons(compare_points)
    if len(latlons_cmp) >= 2:
        folium.PolyLine(latlons_cmp, color=COLOR_COMPARE, weight=3, opacity=0.85,
                        dash_array="6", tooltip=compare_label or "Comparaison").add_to(m)

    # Emprise stricte
    pts = latlons_poly + latlons_cmp
    lats = [la for la, _ in pts]
    lons = [lo for _, lo in pts]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)
    span_lat = max(max_lat - min_lat, 1e-5)
    span_lon = max(max_lon - min_lon, 1e-5)
    pad_lat = max(span_lat * 0.15, 0.002)
    pad_lon = max(span_lon * 0.15, 0.002)
    sw = (min_lat - pad_lat, min_lon - pad_lon)
    ne = (max_lat + pad_lat, max_lon + pad_lon)
    m.fit_bounds([sw, ne], padding=(30, 30))

    return m
