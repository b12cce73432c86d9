"""Document records flowing through the PDF pipeline."""

from .types import (
    Candidate,
    DateRange,
    DocumentContent,
    DocumentMetadata,
    DocumentStructure,
    ProcessedDocument,
    ProcessingInfo,
    ProcessingMethod,
    Section,
    clamp_unit,
)

__all__ = [
    "Candidate",
    "DateRange",
    "DocumentContent",
    "DocumentMetadata",
    "DocumentStructure",
    "ProcessedDocument",
    "ProcessingInfo",
    "ProcessingMethod",
    "Section",
    "clamp_unit",
]
