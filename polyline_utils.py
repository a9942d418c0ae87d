# polyline_utils.py
"""
Encoded Polyline Algorithm Format.

Chaque coordonnée passe par : mise à l'échelle en virgule fixe -> delta par
rapport au point précédent (par axe) -> zigzag -> groupes de 5 bits avec bit
de continuation (0x20), +63 pour rester en ASCII imprimable.

ref: https://developers.google.com/maps/documentation/utilities/polylinealgorithm
"""
from __future__ import annotations
import math
import re
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from config import (
    CHUNK_BITS, CHUNK_MASK, CONTINUATION_BIT, DEFAULT_PRECISION,
    ENCODING_OFFSET, MAX_CHAR, MAX_CHUNK, MIN_CHAR
)
from logging_config import get_logger
from models import Point

logger = get_logger("codec")

PointLike = Union[Point, Tuple[float, float], Sequence[float]]


# 1) Erreurs de décodage
class DecodeError(ValueError):
    def __init__(self, message: str, position: int):
        super().__init__(message)
        self.position = position


class InvalidCharacter(DecodeError):
    pass


class MalformedByte(DecodeError):
    pass


class UnterminatedVarint(DecodeError):
    pass


class TruncatedPair(DecodeError):
    pass


# 2) Virgule fixe
def _check_precision(precision: int) -> None:
    if precision < 0:
        raise ValueError(f"précision négative: {precision}")


def scale(value: float, precision: int) -> int:
    # arrondi "half away from zero" (round() de Python arrondit au pair)
    _check_precision(precision)
    scaled = abs(value) * 10 ** precision
    fixed = math.floor(scaled)
    if scaled - fixed >= 0.5:
        fixed += 1
    return -fixed if value < 0 else fixed


def unscale(fixed: int, precision: int) -> float:
    _check_precision(precision)
    return fixed / 10 ** precision


# 3) Delta par axe
@dataclass
class DeltaTracker:
    previous: int = 0

    def next_delta(self, absolute: int) -> int:
        delta = absolute - self.previous
        self.previous = absolute
        return delta

    def next_absolute(self, delta: int) -> int:
        self.previous += delta
        return self.previous


# 4) Zigzag
def zigzag_encode(value: int) -> int:
    return ~(value << 1) if value < 0 else value << 1


def zigzag_decode(value: int) -> int:
    return ~(value >> 1) if (value & 1) else (value >> 1)


# 5) Varint 5 bits
def encode_varint(value: int) -> str:
    if value < 0:
        raise ValueError(f"varint négatif: {value}")
    chunks = []
    while value >= CONTINUATION_BIT:
        chunks.append(chr((CONTINUATION_BIT | (value & CHUNK_MASK)) + ENCODING_OFFSET))
        value >>= CHUNK_BITS
    chunks.append(chr(value + ENCODING_OFFSET))
    return "".join(chunks)


def decode_varint(encoded: str, cursor: int = 0) -> Tuple[int, int]:
    """Lit un groupe à partir de ``cursor``; renvoie (valeur, curseur après le groupe)."""
    result = 0; shift = 0
    index = cursor
    n = len(encoded)
    while index < n:
        chunk = ord(encoded[index]) - ENCODING_OFFSET
        if chunk < 0 or chunk > MAX_CHUNK:
            raise MalformedByte(
                f"octet {encoded[index]!r} invalide en position {index}", index)
        index += 1
        result |= (chunk & CHUNK_MASK) << shift
        shift += CHUNK_BITS
        if not chunk & CONTINUATION_BIT:
            return result, index
    raise UnterminatedVarint(
        f"groupe commencé en position {cursor} non terminé (fin de chaîne)", cursor)


# 6) Encodage / décodage
def _latlon(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, Point):
        return point.latitude, point.longitude
    la, lo = point
    return la, lo


def encode(points: Iterable[PointLike], precision: int = DEFAULT_PRECISION) -> str:
    """
    Encode une suite de points (Point ou paires (lat, lon)) en polyline.

    Les deltas sont calculés sur les valeurs déjà arrondies, latitude puis
    longitude pour chaque point.
    """
    _check_precision(precision)
    lat_tracker, lon_tracker = DeltaTracker(), DeltaTracker()
    out: List[str] = []
    for point in points:
        la, lo = _latlon(point)
        d_lat = lat_tracker.next_delta(scale(la, precision))
        d_lon = lon_tracker.next_delta(scale(lo, precision))
        out.append(encode_varint(zigzag_encode(d_lat)))
        out.append(encode_varint(zigzag_encode(d_lon)))
    return "".join(out)


def _check_characters(encoded: str) -> None:
    for i, ch in enumerate(encoded):
        if not MIN_CHAR <= ord(ch) <= MAX_CHAR:
            raise InvalidCharacter(
                f"caractère {ch!r} hors de la plage [{MIN_CHAR}, {MAX_CHAR}] en position {i}", i)


def _decode_fixed(encoded: str) -> List[Tuple[int, int]]:
    _check_characters(encoded)
    fixed: List[Tuple[int, int]] = []
    lat_tracker, lon_tracker = DeltaTracker(), DeltaTracker()
    index = 0
    n = len(encoded)
    while index < n:
        d_lat, index = decode_varint(encoded, index)
        if index >= n:
            raise TruncatedPair(
                f"latitude sans longitude pour le point {len(fixed)} (fin de chaîne)", index)
        d_lon, index = decode_varint(encoded, index)
        fixed.append((lat_tracker.next_absolute(zigzag_decode(d_lat)),
                      lon_tracker.next_absolute(zigzag_decode(d_lon))))
    return fixed


def decode(encoded: str, precision: int = DEFAULT_PRECISION) -> List[Point]:
    _check_precision(precision)
    points = [Point(unscale(la, precision), unscale(lo, precision))
              for la, lo in _decode_fixed(encoded)]
    logger.debug("decoded %d points (p%d, %d chars)", len(points), precision, len(encoded))
    return points


# Raccourcis p5 (~1 m) / p6 (~10 cm)
def encode5(points: Iterable[PointLike]) -> str:
    return encode(points, 5)


def encode6(points: Iterable[PointLike]) -> str:
    return encode(points, 6)


def decode5(encoded: str) -> List[Point]:
    return decode(encoded, 5)


def decode6(encoded: str) -> List[Point]:
    return decode(encoded, 6)


# 7) Entrées collées (JSON, presse-papiers) et précision "auto"
def sanitize_polyline(s: str) -> str:
    if not s:
        return s
    s = s.strip()
    # enlever \n, \r, \t et doubles échappements
    s = s.replace("\\n", "").replace("\\r", "").replace("\\t", "")
    s = s.replace("\\\\", "\\")
    s = re.sub(r"\s+", "", s)
    return s


def valid_coords(points: Sequence[Point]) -> bool:
    return bool(points) and all(p.in_range() for p in points)


def span(points: Sequence[Point]) -> float:
    if not points:
        return 0.0
    lats = [p.latitude for p in points]; lons = [p.longitude for p in points]
    return (max(lats) - min(lats)) + (max(lons) - min(lons))


def guess_precision(encoded: str) -> int:
    # Le format ne porte pas sa précision : on garde celle qui donne des
    # coordonnées plausibles, p5 par défaut.
    fixed = _decode_fixed(encoded)
    c5 = [Point(unscale(la, 5), unscale(lo, 5)) for la, lo in fixed]
    c6 = [Point(unscale(la, 6), unscale(lo, 6)) for la, lo in fixed]
    if valid_coords(c6) and not valid_coords(c5):
        logger.debug("auto precision: p6 (p5 out of range)")
        return 6
    return 5


def resolve_precision(encoded: str, mode: str = "auto") -> int:
    # "encoded" doit déjà être nettoyé (sanitize_polyline)
    if mode == "auto":
        return guess_precision(encoded) if encoded else DEFAULT_PRECISION
    if mode.startswith("p") and mode[1:].isdigit():
        return int(mode[1:])
    raise ValueError(f"mode de décodage inconnu: {mode!r}")


def decode_polyline(encoded: str, mode: str = "auto") -> List[Point]:
    """
    Décode une polyline collée telle quelle.

    ``mode`` : "auto", "p5", "p6" ou plus généralement "pN" (N = précision).
    Les erreurs de décodage sont propagées.
    """
    enc = sanitize_polyline(encoded) or ""
    return decode(enc, resolve_precision(enc, mode))
