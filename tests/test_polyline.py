import pytest

from pharmaroute.services.routing.polyline import PolylineDecodingError, decode_polyline, encode_polyline

# Reference example from the encoded polyline format documentation
ENCODED = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


def test_decode_reference_polyline():
    decoded = decode_polyline(ENCODED)

    assert len(decoded) == 3
    for (lat, lng), (expected_lat, expected_lng) in zip(decoded, POINTS):
        assert lat == pytest.approx(expected_lat)
        assert lng == pytest.approx(expected_lng)


def test_decode_is_deterministic():
    assert decode_polyline(ENCODED) == decode_polyline(ENCODED)


def test_decode_empty_string():
    assert decode_polyline("") == []


def test_encode_matches_reference():
    assert encode_polyline(POINTS) == ENCODED


def test_encode_then_decode_negative_deltas():
    points = [(4.60971, -74.08175), (4.6, -74.09), (4.61234, -74.07001)]
    decoded = decode_polyline(encode_polyline(points))
    assert decoded == [pytest.approx(point) for point in points]


@pytest.mark.parametrize(
    "encoded",
    [
        "_p~iF~ps|",  # ends while the continuation bit is set
        "_p~iF",  # latitude without longitude
        "_p~iF ps|U",  # space is below the character offset
    ],
)
def test_decode_malformed_input_fails_fast(encoded):
    with pytest.raises(PolylineDecodingError):
        decode_polyline(encoded)


def test_decoding_error_is_a_value_error():
    with pytest.raises(ValueError):
        decode_polyline("_")
