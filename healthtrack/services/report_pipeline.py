"""Upload processing: text acquisition -> extraction -> validation, one file at a time."""
from __future__ import annotations

import asyncio
import functools
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from healthtrack.schemas.metrics import HealthMetricRecord
from healthtrack.services import text_acquisition
from healthtrack.services.extraction import Clock, extract_health_data
from healthtrack.services.text_acquisition import TextAcquisitionError
from healthtrack.services.validation import screen_health_data

logger = logging.getLogger("healthtrack")


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


TEXT_EXTRACTION_TIMEOUT_S = _env_float("TEXT_EXTRACTION_TIMEOUT_S", 30.0)


@dataclass
class UploadOutcome:
    file_name: str
    file_size: int
    file_type: str
    records: List[HealthMetricRecord] = field(default_factory=list)
    rejected_count: int = 0
    source: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def acquire_text(
    data: bytes,
    filename: str,
    content_type: str,
    timeout_s: Optional[float] = None,
) -> Tuple[str, str]:
    """Run the blocking PDF/OCR collaborator in a worker thread under a timeout.

    On timeout the caller stops waiting; the worker thread is left to finish on its own.
    Any other failure of the PDF or OCR libraries surfaces as ``TextAcquisitionError``.
    """
    limit = TEXT_EXTRACTION_TIMEOUT_S if timeout_s is None else timeout_s
    loop = asyncio.get_running_loop()
    work = functools.partial(text_acquisition.extract_text_from_bytes, data, filename, content_type)
    try:
        return await asyncio.wait_for(loop.run_in_executor(None, work), timeout=limit)
    except asyncio.TimeoutError as exc:
        raise TextAcquisitionError(f"Text extraction timed out after {limit:g}s") from exc
    except TextAcquisitionError:
        raise
    except Exception as exc:
        logger.exception({"function": "acquire_text", "file_name": filename, "error": str(exc)})
        raise TextAcquisitionError(f"Unreadable file: {exc}") from exc


async def process_upload(
    data: bytes,
    filename: str,
    content_type: str,
    *,
    clock: Optional[Clock] = None,
    timeout_s: Optional[float] = None,
) -> UploadOutcome:
    """Process one file. Acquisition failures are captured in ``outcome.error``."""
    outcome = UploadOutcome(file_name=filename, file_size=len(data), file_type=content_type or "")
    if not data:
        outcome.error = "Empty file"
        return outcome
    try:
        text, source = await acquire_text(data, filename, content_type, timeout_s)
    except TextAcquisitionError as exc:
        outcome.error = str(exc)
        logger.info({"function": "process_upload", "file_name": filename, "status": "failed", "error": str(exc)})
        return outcome

    candidates = extract_health_data(text, filename, clock=clock)
    report = screen_health_data(candidates)
    outcome.records = report.accepted
    outcome.rejected_count = len(report.rejected)
    outcome.source = source
    logger.info({
        "function": "process_upload",
        "file_name": filename,
        "status": "ok",
        "source": source,
        "accepted": len(report.accepted),
        "rejected": len(report.rejected),
    })
    return outcome


async def process_batch(
    files: Sequence[Tuple[bytes, str, str]],
    *,
    clock: Optional[Clock] = None,
    timeout_s: Optional[float] = None,
    on_progress: Optional[Callable[[int, int, UploadOutcome], None]] = None,
) -> List[UploadOutcome]:
    """Process ``(data, filename, content_type)`` tuples sequentially; one outcome per file."""
    outcomes: List[UploadOutcome] = []
    total = len(files)
    for index, (data, filename, content_type) in enumerate(files, start=1):
        outcome = await process_upload(data, filename, content_type, clock=clock, timeout_s=timeout_s)
        outcomes.append(outcome)
        if on_progress is not None:
            on_progress(index, total, outcome)
    return outcomes


__all__ = [
    "TEXT_EXTRACTION_TIMEOUT_S",
    "UploadOutcome",
    "acquire_text",
    "process_upload",
    "process_batch",
]
