"""Decoded reading types shared by the decoder, API and CLI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Generic, Optional, TypeVar

from models.address import Address

T = TypeVar("T")


class FormatTag(IntEnum):
    """Leading byte identifying the advertisement layout."""

    FULL = 0x05
    CUT = 0xC5

    @property
    def layout(self) -> str:
        return "full" if self is FormatTag.FULL else "cut"


@dataclass(frozen=True)
class Measurement(Generic[T]):
    """A decoded value and whether it may be used.

    ``value`` still carries the transformed sentinel when ``valid`` is false.
    A field that the layout does not encode at all has ``value`` set to None.
    """

    valid: bool
    value: Optional[T]

    @classmethod
    def missing(cls) -> Measurement[T]:
        return cls(valid=False, value=None)

    @property
    def present(self) -> bool:
        return self.value is not None

    def get(self) -> Optional[T]:
        """Return the value when usable, otherwise None."""
        return self.value if self.valid else None


@dataclass(frozen=True, slots=True)
class Reading:
    """A single advertisement decoded into typed measurements."""

    format_tag: FormatTag
    captured_at: datetime
    temperature: Measurement[float]
    humidity: Measurement[float]
    pressure: Measurement[int]
    acceleration_x: Measurement[int]
    acceleration_y: Measurement[int]
    acceleration_z: Measurement[int]
    battery_voltage: Measurement[float]
    transmit_power: Measurement[int]
    movement_counter: Measurement[int]
    sequence_number: Measurement[int]
    address: Address

    @property
    def layout(self) -> str:
        return self.format_tag.layout

    def measurements(self) -> dict[str, Measurement]:
        """Measurement fields in wire order, keyed by field name."""
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "pressure": self.pressure,
            "acceleration_x": self.acceleration_x,
            "acceleration_y": self.acceleration_y,
            "acceleration_z": self.acceleration_z,
            "battery_voltage": self.battery_voltage,
            "transmit_power": self.transmit_power,
            "movement_counter": self.movement_counter,
            "sequence_number": self.sequence_number,
        }
