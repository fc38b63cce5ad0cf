"""Power bill upload handling.

Bill OCR is not wired to a recognition service yet: the reader accepts the
same files the sales form does and reports that the values must be checked
by hand. No fields are ever extracted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Union

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".png", ".jpg", ".jpeg", ".webp", ".pdf")
VERIFY_STATUS = "OCR completed - please verify extracted values"


class BillReaderError(ValueError):
    """Raised for bill files the reader cannot accept."""


@dataclass(frozen=True)
class BillExtraction:
    status: str
    fields: Dict[str, str] = field(default_factory=dict)


def read_power_bill(path: Union[str, Path]) -> BillExtraction:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Power bill not found: {p}")
    if p.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise BillReaderError(
            f"Unsupported bill format '{p.suffix}'; expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )

    logger.info("Processing power bill %s", p.name)
    return BillExtraction(status=VERIFY_STATUS)


__all__ = ["BillExtraction", "BillReaderError", "SUPPORTED_SUFFIXES", "read_power_bill"]
