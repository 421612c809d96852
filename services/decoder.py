"""Decoder for the full (0x05) and cut (0xC5) sensor advertisement layouts.

Decoding is optimistic: once the buffer is long enough for its layout every
field is read at a fixed big-endian offset and no further failure is possible.
Sentinel raw values mark a field as unusable without rejecting the packet.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

from models.address import ADDRESS_LENGTH, Address
from models.reading import FormatTag, Measurement, Reading

Buffer = Union[bytes, bytearray, memoryview]

MIN_LENGTH = {
    FormatTag.FULL: 24,
    FormatTag.CUT: 18,
}


class DecodeError(ValueError):
    """Base class for packets that cannot be decoded at all."""


class UnsupportedFormat(DecodeError):
    def __init__(self, tag: int) -> None:
        super().__init__(f"unsupported format tag 0x{tag:02x}")
        self.tag = tag


class TooShort(DecodeError):
    def __init__(self, length: int) -> None:
        super().__init__(f"packet too short: {length} bytes")
        self.length = length


def _u16(buffer: Buffer, offset: int) -> int:
    return int.from_bytes(buffer[offset : offset + 2], "big")


def _signed16(raw: int) -> int:
    return raw - 0x10000 if raw & 0x8000 else raw


def temperature_from_raw(raw: int) -> Measurement[float]:
    return Measurement(valid=raw != 0x8000, value=_signed16(raw) * 0.005)


def humidity_from_raw(raw: int) -> Measurement[float]:
    return Measurement(valid=raw != 0xFFFF, value=raw * 0.0025)


def pressure_from_raw(raw: int) -> Measurement[int]:
    return Measurement(valid=raw != 0xFFFF, value=raw + 50000)


def acceleration_from_raw(raw: int) -> Measurement[int]:
    return Measurement(valid=raw != 0x8000, value=_signed16(raw))


def battery_voltage_from_raw(raw: int) -> Measurement[float]:
    """Top 11 bits of the shared power field, in millivolts above 1.6 V."""
    voltage = raw >> 5
    return Measurement(valid=voltage != 0x7FF, value=voltage / 1000 + 1.6)


def transmit_power_from_raw(raw: int) -> Measurement[int]:
    """Bottom 5 bits of the shared power field, in 2 dBm steps above -40 dBm."""
    power = raw & 0x1F
    return Measurement(valid=power != 0x1F, value=power * 2 - 40)


def movement_counter_from_raw(raw: int) -> Measurement[int]:
    return Measurement(valid=raw != 0xFF, value=raw)


def sequence_number_from_raw(raw: int) -> Measurement[int]:
    return Measurement(valid=raw != 0xFFFF, value=raw)


def decode(buffer: Buffer, captured_at: datetime) -> Reading:
    """Decode a raw advertisement payload captured at ``captured_at``.

    ``buffer`` is the manufacturer data without the manufacturer id prefix.
    Raises :class:`UnsupportedFormat` for an unknown leading byte and
    :class:`TooShort` when the buffer does not cover its layout.
    """
    if len(buffer) == 0:
        raise TooShort(0)

    try:
        tag = FormatTag(buffer[0])
    except ValueError:
        raise UnsupportedFormat(buffer[0]) from None

    if len(buffer) < MIN_LENGTH[tag]:
        raise TooShort(len(buffer))

    offset = 1
    temperature = temperature_from_raw(_u16(buffer, offset))
    offset += 2
    humidity = humidity_from_raw(_u16(buffer, offset))
    offset += 2
    pressure = pressure_from_raw(_u16(buffer, offset))
    offset += 2

    if tag is FormatTag.FULL:
        acceleration_x = acceleration_from_raw(_u16(buffer, offset))
        offset += 2
        acceleration_y = acceleration_from_raw(_u16(buffer, offset))
        offset += 2
        acceleration_z = acceleration_from_raw(_u16(buffer, offset))
        offset += 2
    else:
        acceleration_x = acceleration_y = acceleration_z = Measurement.missing()

    power = _u16(buffer, offset)
    offset += 2
    movement_counter = movement_counter_from_raw(buffer[offset])
    offset += 1
    sequence_number = sequence_number_from_raw(_u16(buffer, offset))
    offset += 2
    address = Address.from_bytes(buffer[offset : offset + ADDRESS_LENGTH])

    return Reading(
        format_tag=tag,
        captured_at=captured_at,
        temperature=temperature,
        humidity=humidity,
        pressure=pressure,
        acceleration_x=acceleration_x,
        acceleration_y=acceleration_y,
        acceleration_z=acceleration_z,
        battery_voltage=battery_voltage_from_raw(power),
        transmit_power=transmit_power_from_raw(power),
        movement_counter=movement_counter,
        sequence_number=sequence_number,
        address=address,
    )


def decode_now(buffer: Buffer) -> Reading:
    """Decode ``buffer`` stamped with the current UTC time."""
    return decode(buffer, datetime.now(timezone.utc))
