"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from app.schemas import BatchDecodeRequest, BatchDecodeResponse, DecodeRequest, ReadingOut
from services.batch import BatchDecoder, build_default_batch_decoder
from services.decoder import DecodeError, TooShort, UnsupportedFormat, decode
from services.frames import InvalidFrame, parse_hex_frame
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def get_batch_decoder() -> BatchDecoder:
    return build_default_batch_decoder()


def _rejection_context(exc: DecodeError) -> dict[str, object]:
    context: dict[str, object] = {"reason": str(exc)}
    if isinstance(exc, UnsupportedFormat):
        context["format_tag"] = exc.tag
    elif isinstance(exc, TooShort):
        context["frame_length"] = exc.length
    return context


@router.post(
    "/readings/decode",
    response_model=ReadingOut,
    summary="Decode a single advertisement payload.",
)
async def decode_reading(request: DecodeRequest) -> ReadingOut:
    try:
        frame = parse_hex_frame(request.payload)
    except InvalidFrame as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    captured_at = request.captured_at or datetime.now(timezone.utc)
    try:
        reading = decode(frame, captured_at)
    except DecodeError as exc:
        logger.info("Rejected frame", extra=_rejection_context(exc))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    logger.debug(
        "Decoded frame",
        extra={"format_tag": int(reading.format_tag), "address": str(reading.address)},
    )
    return ReadingOut.from_reading(reading)


@router.post(
    "/readings/decode-batch",
    response_model=BatchDecodeResponse,
    summary="Decode many advertisement payloads, reporting failures per frame.",
)
async def decode_batch(
    request: BatchDecodeRequest,
    batch_decoder: BatchDecoder = Depends(get_batch_decoder),
) -> BatchDecodeResponse:
    limit = get_settings().max_batch_frames
    if len(request.frames) > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Batch exceeds the limit of {limit} frames.",
        )

    captured_at = request.captured_at or datetime.now(timezone.utc)
    result = await run_in_threadpool(batch_decoder.decode_frames, request.frames, captured_at)
    return BatchDecodeResponse.from_result(result)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
