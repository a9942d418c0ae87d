# tests/test_polyline_utils.py
import polyline as pl
import pytest

from models import Point
from polyline_utils import (
    DecodeError, DeltaTracker, InvalidCharacter, MalformedByte, TruncatedPair,
    UnterminatedVarint, decode, decode5, decode6, decode_polyline, decode_varint,
    encode, encode5, encode6, encode_varint, guess_precision, resolve_precision,
    sanitize_polyline, scale, unscale, zigzag_decode, zigzag_encode,
)

GOOGLE_POINTS = [Point(38.5, -120.2), Point(40.7, -120.95), Point(43.252, -126.453)]
GOOGLE_ENCODED = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"

SAMPLE_POINTS = [Point(12.34567, 89.01234), Point(12.34891, 89.01567), Point(12.35678, 89.01891)]
SAMPLE_ENCODED = "mgjjAcfh~OgSySep@gS"

I64_MIN = -2 ** 63
I64_MAX = 2 ** 63 - 1


def _assert_close(actual, expected, precision):
    assert len(actual) == len(expected)
    for a, e in zip(actual, expected):
        assert a.isclose(e, precision), (a, e)


# ------------------ SCALER / DELTA ------------------


@pytest.mark.parametrize("value, expected", [
    (0.5, 1), (1.5, 2), (2.5, 3), (-0.5, -1), (-2.5, -3), (0.49, 0), (-0.49, 0),
])
def test_scale_rounds_half_away_from_zero(value, expected):
    assert scale(value, 0) == expected


def test_scale_and_unscale():
    assert scale(12.34567, 5) == 1234567
    assert scale(-179.9832104, 5) == -17998321
    assert scale(48.208771, 6) == 48208771
    assert unscale(1234567, 5) == pytest.approx(12.34567)
    assert unscale(-17998321, 5) == pytest.approx(-179.98321)


def test_negative_precision_is_rejected():
    with pytest.raises(ValueError):
        scale(1.0, -1)
    with pytest.raises(ValueError):
        encode(GOOGLE_POINTS, -1)
    with pytest.raises(ValueError):
        decode(GOOGLE_ENCODED, -1)


def test_delta_tracker_accumulates():
    t = DeltaTracker()
    assert t.next_delta(100) == 100
    assert t.next_delta(90) == -10
    assert t.previous == 90

    t2 = DeltaTracker()
    assert t2.next_absolute(100) == 100
    assert t2.next_absolute(-10) == 90
    assert t2.previous == 90


# ------------------ ZIGZAG ------------------


@pytest.mark.parametrize("value, expected", [
    (0, 0), (-1, 1), (1, 2), (-2, 3), (2, 4), (I64_MAX, 2 ** 64 - 2), (I64_MIN, 2 ** 64 - 1),
])
def test_zigzag_known_values(value, expected):
    assert zigzag_encode(value) == expected
    assert zigzag_decode(expected) == value


def test_zigzag_inverse_around_extremes():
    for v in [I64_MIN, I64_MIN + 1, -1000, -17, 0, 17, 1000, I64_MAX - 1, I64_MAX]:
        assert zigzag_decode(zigzag_encode(v)) == v


# ------------------ VARINT ------------------


def test_encode_varint_known_values():
    assert encode_varint(0) == "?"
    assert encode_varint(31) == "^"
    assert encode_varint(32) == "_@"
    assert encode_varint(2469134) == "mgjjA"


def test_encode_varint_rejects_negative():
    with pytest.raises(ValueError):
        encode_varint(-1)


def test_varint_roundtrip_consumes_exactly_its_group():
    for v in [0, 1, 31, 32, 1023, 1024, 2469134, 2 ** 32, 2 ** 64 - 1]:
        chunk = encode_varint(v)
        value, cursor = decode_varint(chunk + "??", 0)
        assert value == v
        assert cursor == len(chunk)


def test_decode_varint_from_cursor():
    assert decode_varint("??_@", 2) == (32, 4)


def test_decode_varint_malformed_byte():
    with pytest.raises(MalformedByte) as exc:
        decode_varint("_ ", 0)
    assert exc.value.position == 1
    with pytest.raises(MalformedByte):
        decode_varint("\x7f", 0)


def test_decode_varint_unterminated():
    with pytest.raises(UnterminatedVarint):
        decode_varint("", 0)
    with pytest.raises(UnterminatedVarint) as exc:
        decode_varint("??_", 2)
    assert exc.value.position == 2


# ------------------ ENCODE / DECODE ------------------


def test_empty_path():
    assert encode([], 5) == ""
    assert decode("", 5) == []
    assert encode([], 6) == ""
    assert decode("", 6) == []


def test_known_vectors_encode():
    assert encode(SAMPLE_POINTS, 5) == SAMPLE_ENCODED
    assert encode(GOOGLE_POINTS, 5) == GOOGLE_ENCODED
    assert encode([Point(-79.448, -179.9832104)], 5) == "~d|cN`~oia@"
    assert encode([Point(-37.472889, -72.353958)] * 2, 5) == "p|ucFfsrxL??"


def test_known_vectors_precision_6():
    vienna = [Point(48.208771, 16.372572), Point(48.210133, 16.374164), Point(48.210495, 16.373436)]
    assert encode(vienna, 6) == "ewl}zAwthf^ctAobBsUnl@"
    _assert_close(decode("ewl}zAwthf^ctAobBsUnl@", 6), vienna, 6)
    assert encode([Point(-37.472889, -72.353958)] * 2, 6) == "pfdnfAjic_iC??"


def test_known_vectors_decode():
    _assert_close(decode(SAMPLE_ENCODED, 5), SAMPLE_POINTS, 5)
    _assert_close(decode(GOOGLE_ENCODED, 5), GOOGLE_POINTS, 5)
    _assert_close(decode("~d|cN`~oia@", 5), [Point(-79.448, -179.98321)], 5)
    _assert_close(decode("p|ucFfsrxL??", 5), [Point(-37.47289, -72.35396)] * 2, 5)


def test_encode_accepts_tuples():
    assert encode([p.as_tuple() for p in GOOGLE_POINTS], 5) == GOOGLE_ENCODED


@pytest.mark.parametrize("precision", range(0, 8))
def test_roundtrip_within_precision(precision):
    path = [
        Point(0.0, 0.0), Point(-90.0, -180.0), Point(90.0, 180.0),
        Point(45.5017123, -73.5673456), Point(-33.8688197, 151.2092955),
        Point(-33.8688197, 151.2092955), Point(0.0000004, -0.0000004),
    ]
    _assert_close(decode(encode(path, precision), precision), path, precision)


def test_single_point_and_zero_point():
    assert encode([Point(0.0, 0.0)], 5) == "??"
    assert decode("??", 5) == [Point(0.0, 0.0)]


def test_precision_mismatch_scales_by_ten():
    decoded = decode(encode(GOOGLE_POINTS, 5), 6)
    for got, orig in zip(decoded, GOOGLE_POINTS):
        assert got.latitude == pytest.approx(orig.latitude / 10)
        assert got.longitude == pytest.approx(orig.longitude / 10)


def test_shorthands():
    assert encode5(GOOGLE_POINTS) == encode(GOOGLE_POINTS, 5)
    assert encode6([Point(-79.4486385, -179.9832104)]) == "|bdpvCruhhvI"
    assert decode5(GOOGLE_ENCODED) == decode(GOOGLE_ENCODED, 5)
    _assert_close(decode6("|bdpvCruhhvI"), [Point(-79.448639, -179.98321)], 6)


# ------------------ MALFORMED INPUT ------------------


def test_invalid_character():
    with pytest.raises(InvalidCharacter) as exc:
        decode(GOOGLE_ENCODED + "!", 5)
    assert exc.value.position == len(GOOGLE_ENCODED)
    with pytest.raises(InvalidCharacter):
        decode("_p~iF é", 5)


def test_unterminated_varint():
    # 'a' = 97 - 63 = 34 : bit de continuation sans suite
    with pytest.raises(UnterminatedVarint):
        decode("a", 5)
    with pytest.raises(UnterminatedVarint):
        decode("mgjjAc", 5)


def test_truncated_pair():
    with pytest.raises(TruncatedPair) as exc:
        decode("?", 5)
    assert exc.value.position == 1
    with pytest.raises(TruncatedPair):
        decode(SAMPLE_ENCODED + "mgjjA", 5)


def test_decode_errors_share_a_base():
    for bad in ["!", "a", "?"]:
        with pytest.raises(DecodeError):
            decode(bad, 5)
    assert issubclass(DecodeError, ValueError)


# ------------------ LENIENT DECODE ------------------


def test_sanitize_polyline():
    assert sanitize_polyline("") == ""
    assert sanitize_polyline("  _p~iF~ps|U\\n_ulLnnqC\n_mqNvxq`@ \t") == GOOGLE_ENCODED


def test_guess_precision():
    montreal = [Point(45.5017, -73.5673), Point(45.5088, -73.5540)]
    assert guess_precision(encode(montreal, 6)) == 6
    assert guess_precision(encode(montreal, 5)) == 5


def test_decode_polyline_modes():
    montreal = [Point(45.5017, -73.5673), Point(45.5088, -73.5540)]
    enc6 = encode(montreal, 6)
    _assert_close(decode_polyline(enc6), montreal, 6)
    _assert_close(decode_polyline(enc6, mode="p6"), montreal, 6)
    _assert_close(decode_polyline(" " + GOOGLE_ENCODED + "\\n", mode="p5"), GOOGLE_POINTS, 5)
    assert decode_polyline("   ") == []


def test_resolve_precision():
    montreal = [Point(45.5017, -73.5673), Point(45.5088, -73.5540)]
    assert resolve_precision("") == 5
    assert resolve_precision(encode(montreal, 6)) == 6
    assert resolve_precision(GOOGLE_ENCODED, "p6") == 6
    assert resolve_precision("", "p0") == 0
    with pytest.raises(ValueError):
        resolve_precision(GOOGLE_ENCODED, "p")
    with pytest.raises(ValueError):
        resolve_precision("", "precise")


def test_decode_polyline_propagates_errors():
    with pytest.raises(TruncatedPair):
        decode_polyline("?")
    with pytest.raises(ValueError):
        decode_polyline(GOOGLE_ENCODED, mode="precise")


# ------------------ INTEROP ------------------


def test_agrees_with_polyline_package():
    path = [(45.50171, -73.56734), (45.50882, -73.55401), (45.51003, -73.56012), (45.49872, -73.57555)]
    for precision in (5, 6):
        assert encode(path, precision) == pl.encode(path, precision=precision)
        ours = decode(pl.encode(path, precision=precision), precision)
        theirs = pl.decode(encode(path, precision), precision=precision)
        for p, (la, lo) in zip(ours, theirs):
            assert p.latitude == pytest.approx(la)
            assert p.longitude == pytest.approx(lo)
