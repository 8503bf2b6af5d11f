"""Invoice document adapters: PDF/ZIP expansion and invoice field extraction."""

from .documents import (
    ExtractionStatus,
    InvoiceDocumentError,
    InvoiceExtractionResult,
    InvoiceUpload,
    PdfPlumberTextExtractor,
    TextExtractor,
    extract_invoices,
    load_invoice_uploads,
    parsed_invoices,
)
from .text_fields import InvoiceFields, extract_invoice_fields

__all__ = [
    "ExtractionStatus",
    "InvoiceDocumentError",
    "InvoiceExtractionResult",
    "InvoiceFields",
    "InvoiceUpload",
    "PdfPlumberTextExtractor",
    "TextExtractor",
    "extract_invoice_fields",
    "extract_invoices",
    "load_invoice_uploads",
    "parsed_invoices",
]
