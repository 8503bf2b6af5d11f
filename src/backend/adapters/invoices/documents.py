from __future__ import annotations

import io
import logging
import zipfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Protocol

from pydantic import BaseModel

from common.reconciliation.models import ParsedInvoice

from .text_fields import extract_invoice_fields

logger = logging.getLogger(__name__)

TEXT_PREVIEW_CHARS = 200


class InvoiceDocumentError(ValueError):
    pass


class TextExtractor(Protocol):
    def extract_text(self, data: bytes) -> str:
        """Return the text of a PDF document."""
        ...


class PdfPlumberTextExtractor:
    """Reads text from the first `max_pages` pages of a PDF with pdfplumber."""

    def __init__(self, *, max_pages: int = 1) -> None:
        self._max_pages = max_pages

    def extract_text(self, data: bytes) -> str:
        import pdfplumber

        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = pdf.pages[: self._max_pages]
            return "\n".join(page.extract_text() or "" for page in pages)


class ExtractionStatus(str, Enum):
    OK = "OK"
    ERROR = "ERROR"
    UNSUPPORTED = "UNSUPPORTED"


class InvoiceExtractionResult(BaseModel):
    source_file: str
    entry_name: Optional[str] = None
    status: ExtractionStatus
    message: str = ""
    text_preview: str = ""
    invoice: Optional[ParsedInvoice] = None


@dataclass(frozen=True)
class InvoiceUpload:
    filename: str
    content: bytes


@dataclass(frozen=True)
class _PdfJob:
    source_file: str
    entry_name: Optional[str]
    data: bytes


def load_invoice_uploads(paths: Iterable[str | Path]) -> list[InvoiceUpload]:
    uploads: list[InvoiceUpload] = []
    for raw in paths:
        path = Path(raw)
        if not path.exists():
            raise InvoiceDocumentError(f"Invoice file not found: {path}")
        uploads.append(InvoiceUpload(filename=path.name, content=path.read_bytes()))
    return uploads


def extract_invoices(
    uploads: Iterable[InvoiceUpload],
    *,
    extractor: Optional[TextExtractor] = None,
    max_workers: int = 4,
) -> list[InvoiceExtractionResult]:
    """
    Extract invoice fields from uploaded PDFs and ZIP archives of PDFs.

    Every PDF (standalone or archive entry) becomes one result. Unsupported files,
    unreadable archives and PDFs whose text cannot be extracted become ERROR or
    UNSUPPORTED results instead of raising. Results keep upload order, archive
    entries in archive order, even though PDFs are read concurrently.
    """
    extractor = extractor or PdfPlumberTextExtractor()

    slots: list[InvoiceExtractionResult | _PdfJob] = []
    for upload in uploads:
        slots.extend(_expand_upload(upload))

    jobs = [slot for slot in slots if isinstance(slot, _PdfJob)]
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        extracted = iter(list(pool.map(lambda job: _extract_one(job, extractor), jobs)))

    results = [next(extracted) if isinstance(slot, _PdfJob) else slot for slot in slots]
    failed = sum(1 for r in results if r.status != ExtractionStatus.OK)
    logger.info("Extracted %d invoice documents (%d failed or unsupported)", len(results), failed)
    return results


def parsed_invoices(results: Iterable[InvoiceExtractionResult]) -> list[ParsedInvoice]:
    return [r.invoice for r in results if r.status == ExtractionStatus.OK and r.invoice is not None]


def _expand_upload(upload: InvoiceUpload) -> list[InvoiceExtractionResult | _PdfJob]:
    name = upload.filename.lower()
    if name.endswith(".pdf"):
        return [_PdfJob(source_file=upload.filename, entry_name=None, data=upload.content)]
    if name.endswith(".zip"):
        try:
            return _expand_zip(upload)
        except zipfile.BadZipFile as exc:
            logger.warning("Could not read ZIP %s: %s", upload.filename, exc)
            return [
                InvoiceExtractionResult(
                    source_file=upload.filename,
                    status=ExtractionStatus.ERROR,
                    message=f"Could not read ZIP file: {exc}",
                )
            ]
    logger.warning("Unsupported invoice file type: %s", upload.filename)
    return [
        InvoiceExtractionResult(
            source_file=upload.filename,
            status=ExtractionStatus.UNSUPPORTED,
            message="Only PDF and ZIP files are supported.",
        )
    ]


def _expand_zip(upload: InvoiceUpload) -> list[InvoiceExtractionResult | _PdfJob]:
    jobs: list[InvoiceExtractionResult | _PdfJob] = []
    with zipfile.ZipFile(io.BytesIO(upload.content)) as archive:
        for info in archive.infolist():
            entry = info.filename.lstrip("/")
            if info.is_dir() or _is_metadata_entry(entry) or not entry.lower().endswith(".pdf"):
                continue
            jobs.append(_PdfJob(source_file=upload.filename, entry_name=entry, data=archive.read(info)))
    return jobs


def _is_metadata_entry(entry: str) -> bool:
    base = entry.rsplit("/", 1)[-1]
    return entry.startswith("__MACOSX/") or base.startswith("._") or base == ".DS_Store"


def _extract_one(job: _PdfJob, extractor: TextExtractor) -> InvoiceExtractionResult:
    label = f"{job.source_file}:{job.entry_name}" if job.entry_name else job.source_file
    try:
        text = extractor.extract_text(job.data)
    except Exception as exc:
        logger.warning("Text extraction failed for %s: %s", label, exc)
        return InvoiceExtractionResult(
            source_file=job.source_file,
            entry_name=job.entry_name,
            status=ExtractionStatus.ERROR,
            message=f"Could not read PDF: {exc}",
        )

    fields = extract_invoice_fields(text)
    logger.debug("Parsed %s: %s", label, fields.model_dump())
    return InvoiceExtractionResult(
        source_file=job.source_file,
        entry_name=job.entry_name,
        status=ExtractionStatus.OK,
        text_preview=text[:TEXT_PREVIEW_CHARS],
        invoice=ParsedInvoice(source_file=job.source_file, entry_name=job.entry_name, **fields.model_dump()),
    )
