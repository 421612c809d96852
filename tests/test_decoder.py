"""Decoder tests against the published full and cut layout vectors."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from models.address import Address
from models.reading import FormatTag, Measurement
from services import decoder
from services.decoder import TooShort, UnsupportedFormat, decode, decode_now

CAPTURED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

VECTOR_GOOD = "0512FC5394C37C0004FFFC040CAC364200CDCBB8334C884F"
VECTOR_MAX = "057FFFFFFEFFFE7FFF7FFF7FFFFFDEFEFFFECBB8334C884F"
VECTOR_MIN = "058001000000008001800180010000000000CBB8334C884F"
VECTOR_BAD = "058000FFFFFFFF800080008000FFFFFFFFFFFFFFFFFFFFFF"

VECTOR_GOOD_CUT = "C512FC5394C37CAC364200CDCBB8334C884F"
VECTOR_MAX_CUT = "C57FFFFFFEFFFEFFDEFEFFFECBB8334C884F"
VECTOR_MIN_CUT = "C58001000000000000000000CBB8334C884F"
VECTOR_BAD_CUT = "C58000FFFFFFFFFFFFFFFFFFFFFFFFFFFFFF"

EXPECTED_ADDRESS = Address(bytes.fromhex("CBB8334C884F"))


def _decode(vector: str):
    return decode(bytes.fromhex(vector), CAPTURED_AT)


def test_decode_full_layout() -> None:
    reading = _decode(VECTOR_GOOD)

    assert reading.format_tag is FormatTag.FULL
    assert reading.layout == "full"
    assert reading.captured_at == CAPTURED_AT
    assert reading.temperature.valid
    assert reading.temperature.value == pytest.approx(24.3, abs=1e-4)
    assert reading.humidity.valid
    assert reading.humidity.value == pytest.approx(53.49, abs=1e-4)
    assert reading.pressure == Measurement(valid=True, value=100044)
    assert reading.acceleration_x == Measurement(valid=True, value=4)
    assert reading.acceleration_y == Measurement(valid=True, value=-4)
    assert reading.acceleration_z == Measurement(valid=True, value=1036)
    assert reading.transmit_power == Measurement(valid=True, value=4)
    assert reading.battery_voltage.valid
    assert reading.battery_voltage.value == pytest.approx(2.977, abs=1e-4)
    assert reading.movement_counter == Measurement(valid=True, value=66)
    assert reading.sequence_number == Measurement(valid=True, value=205)
    assert reading.address == EXPECTED_ADDRESS
    assert str(reading.address) == "cb:b8:33:4c:88:4f"


def test_decode_full_layout_maximum_values() -> None:
    reading = _decode(VECTOR_MAX)

    assert reading.temperature.value == pytest.approx(163.835, abs=1e-4)
    assert reading.humidity.value == pytest.approx(163.835, abs=1e-4)
    assert reading.pressure.value == 115534
    assert reading.acceleration_x.value == 32767
    assert reading.acceleration_y.value == 32767
    assert reading.acceleration_z.value == 32767
    assert reading.transmit_power.value == 20
    assert reading.battery_voltage.value == pytest.approx(3.646, abs=1e-4)
    assert reading.movement_counter.value == 254
    assert reading.sequence_number.value == 65534
    assert all(measurement.valid for measurement in reading.measurements().values())


def test_decode_full_layout_minimum_values() -> None:
    reading = _decode(VECTOR_MIN)

    assert reading.temperature.value == pytest.approx(-163.835, abs=1e-4)
    assert reading.humidity.value == pytest.approx(0.0)
    assert reading.pressure.value == 50000
    assert reading.acceleration_x.value == -32767
    assert reading.acceleration_y.value == -32767
    assert reading.acceleration_z.value == -32767
    assert reading.transmit_power.value == -40
    assert reading.battery_voltage.value == pytest.approx(1.6, abs=1e-4)
    assert reading.movement_counter.value == 0
    assert reading.sequence_number.value == 0
    assert all(measurement.valid for measurement in reading.measurements().values())


def test_decode_full_layout_sentinels_are_invalid() -> None:
    reading = _decode(VECTOR_BAD)

    assert reading.format_tag is FormatTag.FULL
    for name, measurement in reading.measurements().items():
        assert measurement.valid is False, name
        assert measurement.present, name
        assert measurement.get() is None, name
    assert reading.address == Address(b"\xff" * 6)


def test_decode_cut_layout() -> None:
    reading = _decode(VECTOR_GOOD_CUT)

    assert reading.format_tag is FormatTag.CUT
    assert reading.layout == "cut"
    assert reading.temperature.value == pytest.approx(24.3, abs=1e-4)
    assert reading.humidity.value == pytest.approx(53.49, abs=1e-4)
    assert reading.pressure == Measurement(valid=True, value=100044)
    assert reading.transmit_power == Measurement(valid=True, value=4)
    assert reading.battery_voltage.value == pytest.approx(2.977, abs=1e-4)
    assert reading.movement_counter == Measurement(valid=True, value=66)
    assert reading.sequence_number == Measurement(valid=True, value=205)
    assert reading.address == EXPECTED_ADDRESS


@pytest.mark.parametrize(
    "vector", [VECTOR_GOOD_CUT, VECTOR_MAX_CUT, VECTOR_MIN_CUT, VECTOR_BAD_CUT]
)
def test_cut_layout_never_carries_acceleration(vector: str) -> None:
    reading = _decode(vector)

    for measurement in (reading.acceleration_x, reading.acceleration_y, reading.acceleration_z):
        assert measurement == Measurement.missing()
        assert measurement.valid is False
        assert measurement.present is False


def test_decode_cut_layout_extremes() -> None:
    maximum = _decode(VECTOR_MAX_CUT)
    minimum = _decode(VECTOR_MIN_CUT)

    assert maximum.temperature.value == pytest.approx(163.835, abs=1e-4)
    assert maximum.pressure.value == 115534
    assert maximum.transmit_power.value == 20
    assert maximum.battery_voltage.value == pytest.approx(3.646, abs=1e-4)
    assert minimum.temperature.value == pytest.approx(-163.835, abs=1e-4)
    assert minimum.pressure.value == 50000
    assert minimum.transmit_power.value == -40
    assert minimum.battery_voltage.value == pytest.approx(1.6, abs=1e-4)


def test_decode_cut_layout_sentinels_are_invalid() -> None:
    reading = _decode(VECTOR_BAD_CUT)

    assert not reading.temperature.valid
    assert not reading.humidity.valid
    assert not reading.pressure.valid
    assert not reading.battery_voltage.valid
    assert not reading.transmit_power.valid
    assert not reading.movement_counter.valid
    assert not reading.sequence_number.valid


def test_truncated_full_vector_is_too_short() -> None:
    with pytest.raises(TooShort) as excinfo:
        _decode(VECTOR_GOOD[:-2])

    assert excinfo.value.length == 23
    assert "23" in str(excinfo.value)


@pytest.mark.parametrize(
    ("vector", "minimum"),
    [(VECTOR_GOOD, 24), (VECTOR_GOOD_CUT, 18)],
)
def test_minimum_length_boundary(vector: str, minimum: int) -> None:
    raw = bytes.fromhex(vector)
    assert len(raw) == minimum

    assert decode(raw, CAPTURED_AT).address == EXPECTED_ADDRESS
    with pytest.raises(TooShort):
        decode(raw[: minimum - 1], CAPTURED_AT)


def test_short_buffer_with_supported_tag_is_too_short() -> None:
    with pytest.raises(TooShort) as excinfo:
        decode(b"\xc5", CAPTURED_AT)

    assert excinfo.value.length == 1


@pytest.mark.parametrize("length", [1, 2, 18, 24, 40])
def test_unknown_tag_is_unsupported_regardless_of_length(length: int) -> None:
    raw = b"\x03" + b"\x00" * (length - 1)

    with pytest.raises(UnsupportedFormat) as excinfo:
        decode(raw, CAPTURED_AT)

    assert excinfo.value.tag == 0x03
    assert str(excinfo.value) == "unsupported format tag 0x03"


def test_empty_buffer_is_too_short() -> None:
    with pytest.raises(TooShort) as excinfo:
        decode(b"", CAPTURED_AT)

    assert excinfo.value.length == 0


def test_decode_errors_are_value_errors() -> None:
    with pytest.raises(ValueError):
        decode(b"\xff", CAPTURED_AT)


def test_trailing_bytes_are_ignored() -> None:
    raw = bytes.fromhex(VECTOR_GOOD) + b"\x01\x02\x03"

    assert decode(raw, CAPTURED_AT) == _decode(VECTOR_GOOD)


@pytest.mark.parametrize("wrap", [bytearray, memoryview])
def test_decode_accepts_bytes_like_buffers(wrap) -> None:
    raw = wrap(bytes.fromhex(VECTOR_GOOD))

    assert decode(raw, CAPTURED_AT) == _decode(VECTOR_GOOD)


def test_decode_does_not_keep_a_reference_to_the_buffer() -> None:
    raw = bytearray.fromhex(VECTOR_GOOD)
    reading = decode(raw, CAPTURED_AT)

    raw[18:24] = b"\x00" * 6

    assert reading.address == EXPECTED_ADDRESS


def test_decode_now_delegates_with_current_time(monkeypatch) -> None:
    calls = []
    real_decode = decoder.decode

    def recording_decode(buffer, captured_at):
        calls.append(captured_at)
        return real_decode(buffer, captured_at)

    monkeypatch.setattr(decoder, "decode", recording_decode)
    before = datetime.now(timezone.utc)

    reading = decode_now(bytes.fromhex(VECTOR_GOOD))

    after = datetime.now(timezone.utc)
    assert len(calls) == 1
    assert reading.captured_at is calls[0]
    assert before <= reading.captured_at <= after


def test_reading_is_immutable() -> None:
    reading = _decode(VECTOR_GOOD)

    with pytest.raises(AttributeError):
        reading.temperature = Measurement(valid=True, value=0.0)  # type: ignore[misc]


@pytest.mark.parametrize(
    ("convert", "sentinel"),
    [
        (decoder.temperature_from_raw, 0x8000),
        (decoder.humidity_from_raw, 0xFFFF),
        (decoder.pressure_from_raw, 0xFFFF),
        (decoder.acceleration_from_raw, 0x8000),
        (decoder.movement_counter_from_raw, 0xFF),
        (decoder.sequence_number_from_raw, 0xFFFF),
    ],
)
def test_only_the_sentinel_is_invalid(convert, sentinel: int) -> None:
    assert convert(sentinel).valid is False
    assert convert(sentinel - 1).valid is True
    assert convert(0).valid is True


def test_temperature_is_signed() -> None:
    assert decoder.temperature_from_raw(0xFFFF).value == pytest.approx(-0.005)
    assert decoder.temperature_from_raw(0x0001).value == pytest.approx(0.005)


def test_pressure_does_not_overflow_sixteen_bits() -> None:
    assert decoder.pressure_from_raw(0xFFFE).value == 115534


def test_battery_and_power_are_decoded_independently() -> None:
    # Voltage sentinel with a usable power value.
    raw = (0x7FF << 5) | 0x16
    assert decoder.battery_voltage_from_raw(raw).valid is False
    assert decoder.transmit_power_from_raw(raw) == Measurement(valid=True, value=4)

    # Power sentinel with a usable voltage.
    raw = (1377 << 5) | 0x1F
    assert decoder.transmit_power_from_raw(raw).valid is False
    voltage = decoder.battery_voltage_from_raw(raw)
    assert voltage.valid is True
    assert voltage.value == pytest.approx(2.977, abs=1e-4)
