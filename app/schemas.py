"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from models.address import Address
from models.reading import Measurement, Reading
from services.aggregator import ReadingSummary
from services.batch import BatchResult, BatchStatus


class DecodeRequest(BaseModel):
    """A single hex-encoded advertisement payload."""

    payload: str = Field(..., min_length=1, description="Hex encoded manufacturer data.")
    captured_at: Optional[datetime] = Field(
        default=None, description="Capture time; defaults to the time of the request."
    )


class BatchDecodeRequest(BaseModel):
    frames: List[str] = Field(..., min_length=1)
    captured_at: Optional[datetime] = None


class MeasurementOut(BaseModel):
    """A decoded value; ``value`` is null when the layout does not carry it."""

    valid: bool
    value: Union[int, float, None] = None

    @classmethod
    def from_measurement(cls, measurement: Measurement) -> MeasurementOut:
        return cls(valid=measurement.valid, value=measurement.value)


class ReadingOut(BaseModel):
    """Serialised form of a decoded reading."""

    format_tag: int = Field(..., ge=0, le=0xFF)
    layout: str
    captured_at: datetime
    temperature: MeasurementOut
    humidity: MeasurementOut
    pressure: MeasurementOut
    acceleration_x: MeasurementOut
    acceleration_y: MeasurementOut
    acceleration_z: MeasurementOut
    battery_voltage: MeasurementOut
    transmit_power: MeasurementOut
    movement_counter: MeasurementOut
    sequence_number: MeasurementOut
    address: str = Field(..., description="Lower-case colon separated hex.")

    @field_validator("address")
    @classmethod
    def _canonical_address(cls, value: str) -> str:
        return Address.from_text(value).to_text()

    @classmethod
    def from_reading(cls, reading: Reading) -> ReadingOut:
        measurements = {
            name: MeasurementOut.from_measurement(measurement)
            for name, measurement in reading.measurements().items()
        }
        return cls(
            format_tag=int(reading.format_tag),
            layout=reading.layout,
            captured_at=reading.captured_at,
            address=reading.address.to_text(),
            **measurements,
        )


class FrameErrorOut(BaseModel):
    """Details about a frame that failed to decode."""

    line_number: int = Field(..., ge=1)
    reason: str


class SummaryOut(BaseModel):
    reading_count: int = Field(..., ge=0)
    min_temperature: Optional[float] = None
    max_temperature: Optional[float] = None
    mean_temperature: Optional[float] = None
    per_address_count: Dict[str, int] = Field(default_factory=dict)
    per_layout_count: Dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_summary(cls, summary: ReadingSummary) -> SummaryOut:
        return cls(
            reading_count=summary.reading_count,
            min_temperature=summary.min_temperature,
            max_temperature=summary.max_temperature,
            mean_temperature=summary.mean_temperature,
            per_address_count=dict(summary.per_address_count),
            per_layout_count=dict(summary.per_layout_count),
        )


class BatchDecodeResponse(BaseModel):
    status: BatchStatus
    decoding_ms: int = Field(default=0, ge=0)
    readings: List[ReadingOut] = Field(default_factory=list)
    errors: List[FrameErrorOut] = Field(default_factory=list)
    summary: Optional[SummaryOut] = None

    @classmethod
    def from_result(cls, result: BatchResult) -> BatchDecodeResponse:
        return cls(
            status=result.status,
            decoding_ms=result.decoding_ms,
            readings=[ReadingOut.from_reading(reading) for reading in result.readings],
            errors=[
                FrameErrorOut(line_number=error.line_number, reason=error.reason)
                for error in result.errors
            ],
            summary=SummaryOut.from_summary(result.summary) if result.summary is not None else None,
        )
