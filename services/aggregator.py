"""Summary statistics over decoded readings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable

from models.reading import Reading


@dataclass
class ReadingSummary:
    """Computed statistics for a batch of decoded readings."""

    reading_count: int = 0
    min_temperature: float | None = None
    max_temperature: float | None = None
    mean_temperature: float | None = None
    per_address_count: Dict[str, int] = field(default_factory=dict)
    per_layout_count: Dict[str, int] = field(default_factory=dict)


class ReadingAggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, readings: Iterable[Reading]) -> ReadingSummary:
        summary = ReadingSummary()
        total = 0.0
        temperature_count = 0

        for reading in readings:
            summary.reading_count += 1

            address = str(reading.address)
            summary.per_address_count[address] = (
                summary.per_address_count.get(address, 0) + 1
            )
            summary.per_layout_count[reading.layout] = (
                summary.per_layout_count.get(reading.layout, 0) + 1
            )

            value = reading.temperature.get()
            if value is None:
                continue
            temperature_count += 1
            total += value

            if summary.min_temperature is None or value < summary.min_temperature:
                summary.min_temperature = value
            if summary.max_temperature is None or value > summary.max_temperature:
                summary.max_temperature = value

        if temperature_count:
            summary.mean_temperature = total / temperature_count

        return summary
