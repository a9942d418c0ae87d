from __future__ import annotations
import streamlit as st
st.set_page_config(
    page_title="Encoded Polyline — encodeur / décodeur + carte",
    layout="wide"
)

import json
import zipfile
import pandas as pd
import streamlit.components.v1 as components

from caching import (
    cache_decode, cache_encode, cache_gtfs_shapes, points_key, resource_build_map_html
)
from config import DEFAULT_PRECISION, MAX_PRECISION, MIN_PRECISION, SCHEMA_VERSION
from logging_config import setup_logging
from models import Point
from parsers import parse_coordinates_text
from polyline_utils import DecodeError

logger = setup_logging()

PRECISIONS = list(range(MIN_PRECISION, MAX_PRECISION + 1))
DECODE_MODES = {"Auto (recommandé)": "auto", "Précision 1e-5": "p5", "Précision 1e-6": "p6", "Autre": None}


def _stats_metrics(stats):
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Points", stats["point_count"])
    c2.metric("Caractères", stats["encoded_length"])
    c3.metric("Caractères / point", f"{stats['chars_per_point']:.2f}")
    c4.metric("Précision", f"1e-{stats['precision']}")
    if stats["bounds"]:
        min_lat, min_lon, max_lat, max_lon = stats["bounds"]
        st.caption(f"Emprise : ({min_lat:.6f}, {min_lon:.6f}) → ({max_lat:.6f}, {max_lon:.6f}) · étendue {stats['span']:.6f}°")


def _show_map(label, poly, compare=None, compare_label=""):
    if len(poly) < 2:
        st.info("Au moins deux points valides sont nécessaires pour afficher la carte.")
        return
    html = resource_build_map_html(label, points_key(poly),
                                   points_key(compare) if compare else tuple(),
                                   compare_label, SCHEMA_VERSION)
    components.html(html, height=460, scrolling=False)


# UI
st.title("Encoded Polyline — encodeur / décodeur")
st.caption(
    "Encode des coordonnées (lat, lon) au format Encoded Polyline, ou décode une polyline "
    "(précision 1e-5, 1e-6 ou détection automatique). Tracé affiché sur une carte Folium."
)

tab_dec, tab_enc = st.tabs(["Décodeur", "Encodeur"])

# --- Décodeur
with tab_dec:
    with st.form("decode_form"):
        encoded_in = st.text_area("Polyline encodée", height=120, key="enc_in")
        mode_label = st.selectbox("Précision", list(DECODE_MODES), index=0, key="dec_mode")
        custom_p = st.selectbox("Précision personnalisée (si « Autre »)", PRECISIONS,
                                index=DEFAULT_PRECISION, key="dec_custom")
        submitted_dec = st.form_submit_button("Décoder", type="primary")

    if submitted_dec:
        mode = DECODE_MODES[mode_label] or f"p{custom_p}"
        try:
            st.session_state["last_decode"] = cache_decode(encoded_in or "", mode, SCHEMA_VERSION)
        except DecodeError as e:
            st.session_state.pop("last_decode", None)
            logger.warning("décodage refusé: %s", e)
            st.error(f"**{type(e).__name__}** (position {e.position}) : {e}")

    res = st.session_state.get("last_decode")
    if res and res.get("schema_version") == SCHEMA_VERSION:
        _stats_metrics(res["stats"])
        if res["degenerate"]:
            st.warning("Tracé dégénéré (moins de 2 points ou étendue quasi nulle).")
        if res["out_of_range"]:
            st.warning(f"{len(res['out_of_range'])} point(s) hors plage ±90/±180 — précision erronée ?")

        df = pd.DataFrame(res["points"], columns=["latitude", "longitude"])
        st.dataframe(df, width="stretch", height=300)
        poly = [Point(la, lo) for la, lo in res["points"]]
        _show_map(f"p{res['precision']}", poly)

        d1, d2 = st.columns(2)
        d1.download_button("⬇️ Points (CSV)", data=df.to_csv(index=False),
                           file_name="polyline_points.csv", mime="text/csv")
        d2.download_button("⬇️ Points (GeoJSON)",
                           data=json.dumps({"type": "LineString",
                                            "coordinates": [[lo, la] for la, lo in res["points"]]}),
                           file_name="polyline.geojson", mime="application/geo+json")
    elif not submitted_dec:
        st.info("Colle une polyline puis clique **Décoder**.")
        st.caption("Astuce : si ta polyligne vient d’un JSON, les échappements (\\\\, \\n) sont retirés automatiquement.")

# --- Encodeur
with tab_enc:
    with st.form("encode_form"):
        coords_in = st.text_area("Coordonnées (une paire par ligne, JSON [[lat, lon], …] ou GeoJSON LineString)",
                                 height=160, key="coords_in")
        order = st.radio("Ordre des paires", ["latlon", "lonlat"], horizontal=True, key="enc_order")
        gtfs_file = st.file_uploader("… ou un GTFS (.zip) pour encoder shapes.txt", type=["zip"], key="gtfs_up")
        precision = st.selectbox("Précision", PRECISIONS, index=DEFAULT_PRECISION, key="enc_p")
        submitted_enc = st.form_submit_button("Encoder", type="primary")

    if submitted_enc and coords_in.strip():
        try:
            points, rejected = parse_coordinates_text(coords_in, order=order)
        except ValueError as e:
            st.error(str(e))
            st.stop()
        if rejected:
            st.warning(f"Lignes ignorées : {', '.join(str(n) for n in rejected[:50])}")
        res = cache_encode(points_key(points), precision, SCHEMA_VERSION)
        _stats_metrics(res["stats"])
        if not res["roundtrip_ok"]:
            st.warning("Aller-retour encode/décode hors tolérance.")
        st.code(res["encoded"] or "(vide)", language="text")
        st.download_button("⬇️ Polyline (TXT)", data=res["encoded"],
                           file_name="polyline.txt", mime="text/plain")
        _show_map(f"p{precision}", points)

    if submitted_enc and gtfs_file is not None:
        try:
            shapes = cache_gtfs_shapes(gtfs_file.getvalue(), precision, SCHEMA_VERSION)
        except zipfile.BadZipFile as e:
            logger.warning("GTFS refusé: %s", e)
            st.error(f"Fichier GTFS illisible (zip invalide) : {e}")
            st.stop()
        encoded = shapes["encoded"]
        st.success(f"GTFS : **{len(encoded):,} shapes** encodées (1e-{precision})")
        table = [{"shape_id": sid, "points": len(shapes["shapes_plain"][sid]),
                  "caractères": len(enc), "polyline": enc} for sid, enc in sorted(encoded.items())]
        st.dataframe(table, width="stretch", height=360)
        st.download_button("📥 Télécharger les polylines (JSON)",
                           data=json.dumps(encoded, ensure_ascii=False, indent=2),
                           file_name="gtfs_shapes_polylines.json", mime="application/json")

    if not submitted_enc:
        st.info("Saisis des coordonnées ou charge un GTFS, choisis la précision et clique **Encoder**.")
