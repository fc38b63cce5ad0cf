"""
Tests for the power bill upload stub.
"""

from __future__ import annotations

import pytest

from analytics.bill_reader import VERIFY_STATUS, BillReaderError, read_power_bill


def test_supported_bill_returns_verify_status_and_no_fields(tmp_path):
    bill = tmp_path / "march_bill.PDF"
    bill.write_bytes(b"%PDF-1.4\n")

    extraction = read_power_bill(bill)

    assert extraction.status == VERIFY_STATUS
    assert extraction.fields == {}


def test_unsupported_bill_format(tmp_path):
    bill = tmp_path / "bill.docx"
    bill.write_bytes(b"")

    with pytest.raises(BillReaderError, match="Unsupported"):
        read_power_bill(bill)


def test_missing_bill(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_power_bill(tmp_path / "missing.jpg")
