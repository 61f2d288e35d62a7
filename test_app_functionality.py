#!/usr/bin/env python3
"""Tests for the Streamlit app helpers, settings and logging"""

import io
import json
import logging
from datetime import date

import pandas as pd
import pytest

from aba import ABA, CREDIT, DEBIT, BatchConfig, FooterTotals
from aba_logging import CustomJsonFormatter, SERVICE_NAME
from aba_settings import Settings
from app import (
    PAYMENT_COLUMNS,
    aba_filename,
    batch_summary,
    empty_payments_frame,
    read_payments_csv,
    transactions_from_frame,
)

PAYMENTS_CSV = """bsb,account,transaction_code,amount,account_title,reference,trace_bsb,trace_account,remitter
013-423,069833067,50,1096.85,Frontline Philippines Pty Ltd,INV-12709,063-245,10758330,TT Accountancy P
063-014,10581708,50,102.30,Shi Tay,ExpReim21Jul25,063-245,10758330,TT Accountancy P
,,,,,,,,
063-245,10758330,13,1199.15,Business,28July25,063-245,10758330,TT Accountancy P
"""


def test_read_payments_csv_keeps_leading_zeros():
    frame = read_payments_csv(io.StringIO(PAYMENTS_CSV))
    assert frame.loc[0, "account"] == "069833067"
    assert frame.loc[0, "bsb"] == "013-423"


def test_read_payments_csv_requires_columns():
    with pytest.raises(ValueError, match="amount"):
        read_payments_csv(io.StringIO("bsb,account,transaction_code\n013-423,1,50\n"))


def test_transactions_from_frame_skips_blank_rows():
    transactions = transactions_from_frame(read_payments_csv(io.StringIO(PAYMENTS_CSV)))

    assert len(transactions) == 3
    assert [t.transaction_code for t in transactions] == [CREDIT, CREDIT, DEBIT]
    assert transactions[0].tax == ""
    assert transactions[0].tax_amount == 0


def test_frame_generates_balanced_file():
    transactions = transactions_from_frame(read_payments_csv(io.StringIO(PAYMENTS_CSV)))
    aba = ABA(BatchConfig(bank="CBA", user_name="TT Accountancy Pty Ltd", user_number="301500",
                          date=date(2025, 7, 28)))

    lines = aba.generate(transactions).split("\r\n")

    assert len(lines) == 5
    assert lines[1][8:17] == "069833067"
    assert lines[-1][20:50] == "000000000000001199150000119915"


def test_empty_editor_frame_has_no_transactions():
    frame = empty_payments_frame()
    assert list(frame.columns) == PAYMENT_COLUMNS
    assert transactions_from_frame(frame) == []


def test_batch_summary():
    summary = batch_summary(FooterTotals(net=67076, credit=66666, debit=133742, count=2))

    assert summary == {
        "Payments": "2",
        "Credit Total": "$666.66",
        "Debit Total": "$1,337.42",
        "Net Total": "$670.76",
    }


def test_aba_filename():
    config = BatchConfig(description="Creditors")
    assert aba_filename(config, date(2025, 7, 28)) == "Creditors_20250728.ABA"
    assert aba_filename(BatchConfig(), date(2025, 7, 28)) == "ABA_20250728.ABA"


def test_settings_defaults(monkeypatch):
    for name in ("ABA_APP_PASSWORD", "ASIC_APP_PASSWORD", "ABA_BANK", "ABA_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.app_password == ""
    assert settings.log_level == "INFO"
    assert settings.bank == "CBA"
    assert settings.user_number == "301500"


def test_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("ABA_BANK", "ANZ")
    monkeypatch.setenv("ABA_USER_NAME", "Company")
    monkeypatch.setenv("ASIC_APP_PASSWORD", "secret")

    settings = Settings(_env_file=None)

    assert settings.bank == "ANZ"
    assert settings.user_name == "Company"
    assert settings.app_password == "secret"


def test_json_log_format():
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    record = logging.LogRecord("aba", logging.INFO, __file__, 1, "ABA file generated", None, None)
    record.record_count = 3

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "ABA file generated"
    assert payload["level"] == "INFO"
    assert payload["service"] == SERVICE_NAME
    assert payload["record_count"] == 3
    assert "timestamp" in payload
