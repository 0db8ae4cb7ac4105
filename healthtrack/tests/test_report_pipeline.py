import asyncio
import time
from datetime import datetime, timezone

from healthtrack.services import report_pipeline, text_acquisition
from healthtrack.services.metric_types import MetricType

NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


def clock():
    return NOW


def test_batch_isolates_failing_file():
    files = [
        (b"Hemoglobin: 13.5 g/dL", "good.txt", "text/plain"),
        (b"\xff\xfe\x00broken", "bad.txt", "text/plain"),
        (b"", "empty.txt", "text/plain"),
        (b"TSH: 2.5 mIU/L", "thyroid.txt", "text/plain"),
    ]
    progress = []
    outcomes = asyncio.run(
        report_pipeline.process_batch(
            files, clock=clock, on_progress=lambda i, n, o: progress.append((i, n, o.ok))
        )
    )
    assert [o.file_name for o in outcomes] == ["good.txt", "bad.txt", "empty.txt", "thyroid.txt"]
    assert [o.ok for o in outcomes] == [True, False, False, True]
    assert outcomes[2].error == "Empty file"
    assert outcomes[0].records[0].type is MetricType.HEMOGLOBIN
    assert outcomes[0].records[0].id
    assert outcomes[0].records[0].notes == "Extracted from good.txt"
    assert outcomes[3].source == "text"
    assert progress == [(1, 4, True), (2, 4, False), (3, 4, False), (4, 4, True)]


def test_rejected_values_are_counted():
    outcome = asyncio.run(report_pipeline.process_upload(b"Hemoglobin: 13.5 g/dL", "lab.txt", "text/plain"))
    assert outcome.ok
    assert outcome.rejected_count == 0
    assert outcome.file_size == len(b"Hemoglobin: 13.5 g/dL")


def test_slow_text_acquisition_times_out(monkeypatch):
    def slow(data, filename, content_type):
        time.sleep(0.5)
        return "Hemoglobin: 13.5 g/dL", "text"

    monkeypatch.setattr(text_acquisition, "extract_text_from_bytes", slow)
    outcome = asyncio.run(
        report_pipeline.process_upload(b"data", "slow.pdf", "application/pdf", timeout_s=0.05)
    )
    assert not outcome.ok
    assert "timed out" in outcome.error
    assert outcome.records == []


def test_pdf_without_text_is_a_file_error(monkeypatch):
    class _Pg:
        def extract_text(self):
            return ""

    class _Reader:
        def __init__(self, *_a, **_k):
            self.pages = [_Pg()]

    monkeypatch.setattr(text_acquisition, "PdfReader", _Reader)
    outcome = asyncio.run(report_pipeline.process_upload(b"%PDF-1.4", "scan.pdf", "application/pdf"))
    assert not outcome.ok
    assert "No text extracted from PDF" in outcome.error


def test_image_goes_through_ocr(monkeypatch):
    monkeypatch.setattr(text_acquisition.Image, "open", lambda fp: object())
    monkeypatch.setattr(
        text_acquisition.pytesseract, "image_to_string", lambda img, lang=None: "Pulse: 72 bpm"
    )
    outcome = asyncio.run(report_pipeline.process_upload(b"img", "photo.png", "image/png"))
    assert outcome.ok
    assert outcome.source == "ocr"
    assert [r.type for r in outcome.records] == [MetricType.HEART_RATE]


def test_truncated_image_does_not_abort_batch():
    truncated_png = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x01"
    files = [
        (truncated_png, "scan.png", "image/png"),
        (b"Hemoglobin: 13.5 g/dL", "good.txt", "text/plain"),
    ]
    outcomes = asyncio.run(report_pipeline.process_batch(files, clock=clock))
    assert [o.ok for o in outcomes] == [False, True]
    assert outcomes[0].error
    assert [r.type for r in outcomes[1].records] == [MetricType.HEMOGLOBIN]


def test_unexpected_library_error_becomes_file_error(monkeypatch):
    def broken(img, lang=None):
        raise OSError("image file is truncated")

    monkeypatch.setattr(text_acquisition.Image, "open", lambda fp: object())
    monkeypatch.setattr(text_acquisition.pytesseract, "image_to_string", broken)
    outcome = asyncio.run(report_pipeline.process_upload(b"img", "photo.png", "image/png"))
    assert not outcome.ok
    assert outcome.error == "Unreadable file: image file is truncated"
    assert outcome.records == []
