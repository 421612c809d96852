"""Batch decoding of many advertisement frames with per-frame error reporting."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from models.reading import Reading
from services.aggregator import ReadingAggregator, ReadingSummary
from services.decoder import DecodeError, decode
from services.frames import InvalidFrame, parse_hex_frame
from settings import get_settings

logger = logging.getLogger(__name__)


class BatchStatus(str, Enum):
    """Outcome of decoding a batch of frames."""

    processed = "processed"
    partial = "partial"
    failed = "failed"


@dataclass
class FrameError:
    """A frame that could not be decoded and why."""

    line_number: int
    reason: str


@dataclass
class BatchResult:
    status: BatchStatus
    readings: List[Reading] = field(default_factory=list)
    errors: List[FrameError] = field(default_factory=list)
    summary: Optional[ReadingSummary] = None
    decoding_ms: int = 0


class BatchDecoder:
    """Decodes batches of hex frames, fanning out over a thread pool."""

    def __init__(self, aggregator: ReadingAggregator, workers: int = 4) -> None:
        self.aggregator = aggregator
        self.executor = ThreadPoolExecutor(max_workers=workers)

    def decode_frames(self, frames: Sequence[str], captured_at: datetime) -> BatchResult:
        """Decode frames numbered from 1 in the order given."""
        return self._decode_numbered(list(enumerate(frames, start=1)), captured_at)

    def decode_lines(self, lines: Iterable[str], captured_at: datetime) -> BatchResult:
        """Decode one frame per line, skipping blank lines and ``#`` comments."""
        numbered: list[tuple[int, str]] = []
        for line_number, line in enumerate(lines, start=1):
            candidate = line.strip()
            if not candidate or candidate.startswith("#"):
                continue
            numbered.append((line_number, candidate))
        return self._decode_numbered(numbered, captured_at)

    def shutdown(self) -> None:
        """Clean up executor resources during application shutdown."""
        self.executor.shutdown(wait=False, cancel_futures=True)

    def _decode_numbered(
        self, numbered: Sequence[Tuple[int, str]], captured_at: datetime
    ) -> BatchResult:
        start_time = time.perf_counter()
        outcomes = self.executor.map(
            lambda item: self._decode_one(item[0], item[1], captured_at), numbered
        )

        readings: list[Reading] = []
        errors: list[FrameError] = []
        for outcome in outcomes:
            if isinstance(outcome, FrameError):
                logger.warning(
                    "Skipping frame %d: %s",
                    outcome.line_number,
                    outcome.reason,
                    extra={"line_number": outcome.line_number, "reason": outcome.reason},
                )
                errors.append(outcome)
            else:
                readings.append(outcome)

        summary: Optional[ReadingSummary] = self.aggregator.aggregate(readings)
        if not readings and errors:
            status = BatchStatus.failed
            summary = None
        elif errors:
            status = BatchStatus.partial
        else:
            status = BatchStatus.processed

        decoding_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Decoded batch",
            extra={
                "frame_count": len(numbered),
                "error_count": len(errors),
                "decoding_ms": decoding_ms,
            },
        )
        return BatchResult(
            status=status,
            readings=readings,
            errors=errors,
            summary=summary,
            decoding_ms=decoding_ms,
        )

    @staticmethod
    def _decode_one(
        line_number: int, text: str, captured_at: datetime
    ) -> Union[Reading, FrameError]:
        try:
            return decode(parse_hex_frame(text), captured_at)
        except (InvalidFrame, DecodeError) as exc:
            return FrameError(line_number=line_number, reason=str(exc))


@lru_cache
def build_default_batch_decoder(workers: Optional[int] = None) -> BatchDecoder:
    """Factory that wires the batch decoder from settings."""
    worker_count = workers or get_settings().decoder_workers
    return BatchDecoder(aggregator=ReadingAggregator(), workers=worker_count)
