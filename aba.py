"""ABA (CEMTEX direct entry) batch file generation.

A file is one descriptive record (type 0), one detail record (type 1) per
payment and a file total record (type 7), each exactly 120 characters and
joined with CRLF::

    aba = ABA(BatchConfig(bank="ANZ", user_name="Company", user_number=1337,
                          description="Creditors"))
    content = aba.generate([Transaction(...), ...])
"""

import logging
import math
from dataclasses import asdict, dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, Union

from aba_errors import EmptyBatchError
from aba_fields import (
    RIGHT,
    Field,
    difference,
    format_bsb,
    format_date,
    format_time,
    render_record,
    reserved,
    sum_amounts,
    to_cents,
    whole_number,
)

logger = logging.getLogger(__name__)

CREDIT = 50
DEBIT = 13

RECORD_LENGTH = 120
LINE_TERMINATOR = "\r\n"

# Descriptive Record (Type 0)
# NOTE: the account is blank filled and right justified like the detail
# record, even though the bank format guide leaves it unspecified.
HEADER_LAYOUT = (
    Field("record_type", 1, literal="0"),           # Pos 1: Record type (1)
    Field("bsb", 7),                                # Pos 2-8: BSB (7)
    Field("account", 9, justify=RIGHT),             # Pos 9-17: Account number (9)
    reserved(1),                                    # Pos 18: Blank (1)
    Field("sequence", 2, literal="01"),             # Pos 19-20: Reel sequence (2)
    Field("bank", 3),                               # Pos 21-23: Financial institution (3)
    reserved(7),                                    # Pos 24-30: Blank (7)
    Field("user_name", 26),                         # Pos 31-56: User name (26)
    Field("user_number", 6, numeric=True),          # Pos 57-62: User ID/APCA number (6)
    Field("description", 12),                       # Pos 63-74: Entry description (12)
    Field("date", 6),                               # Pos 75-80: Processing date DDMMYY (6)
    Field("time", 4),                               # Pos 81-84: Processing time HHMM (4)
    reserved(36),                                   # Pos 85-120: Blank (36)
)

# Detail Record (Type 1)
DETAIL_LAYOUT = (
    Field("record_type", 1, literal="1"),           # Pos 1: Record type (1)
    Field("bsb", 7),                                # Pos 2-8: BSB with hyphen (7)
    Field("account", 9, justify=RIGHT),             # Pos 9-17: Account number (9)
    Field("tax", 1),                                # Pos 18: Indicator (1)
    Field("transaction_code", 2, numeric=True),     # Pos 19-20: Transaction code (2)
    Field("amount", 10, numeric=True),              # Pos 21-30: Amount in cents (10)
    Field("account_title", 32),                     # Pos 31-62: Account title (32)
    Field("reference", 18),                         # Pos 63-80: Lodgement reference (18)
    Field("trace_bsb", 7),                          # Pos 81-87: Trace BSB (7)
    Field("trace_account", 9, justify=RIGHT),       # Pos 88-96: Trace account (9)
    Field("remitter", 16),                          # Pos 97-112: Remitter name (16)
    Field("tax_amount", 8, numeric=True),           # Pos 113-120: Withholding tax (8)
)

# File Total Record (Type 7)
FOOTER_LAYOUT = (
    Field("record_type", 1, literal="7"),           # Pos 1: Record type (1)
    Field("bsb_filler", 7, literal="999-999"),      # Pos 2-8: BSB filler (7)
    reserved(12),                                   # Pos 9-20: Blank (12)
    Field("net", 10, numeric=True),                 # Pos 21-30: Net total (10)
    Field("credit", 10, numeric=True),              # Pos 31-40: Credit total (10)
    Field("debit", 10, numeric=True),               # Pos 41-50: Debit total (10)
    reserved(24),                                   # Pos 51-74: Blank (24)
    Field("count", 6, numeric=True),                # Pos 75-80: Record count (6)
    reserved(40),                                   # Pos 81-120: Blank (40)
)


ProcessingDate = Optional[date]
ProcessingTime = Optional[Union[time, datetime]]


@dataclass(frozen=True)
class BatchConfig:
    """Descriptive record settings for one file.

    ``time`` may be a ``datetime``, in which case its date also stamps the
    file, or a ``datetime.time`` combined with ``date``. Without a time the
    time field is left blank; without either the current date is used.
    """

    bsb: str = ""
    account: str = ""
    bank: str = ""
    user_name: str = ""
    user_number: int = 0
    description: str = ""
    date: ProcessingDate = None
    time: ProcessingTime = None


@dataclass(frozen=True)
class Transaction:
    """One payment instruction"""

    bsb: str
    account: str
    transaction_code: int
    amount: Decimal
    account_title: str = ""
    reference: str = ""
    trace_bsb: str = ""
    trace_account: str = ""
    remitter: str = ""
    tax: str = ""
    tax_amount: Decimal = 0

    @classmethod
    def from_mapping(cls, row):
        """Build a transaction from a dict or DataFrame row, filling defaults"""
        return cls(
            bsb=_text(row.get("bsb")),
            account=_text(row.get("account")),
            transaction_code=_code(row.get("transaction_code")),
            amount=_amount(row.get("amount")),
            account_title=_text(row.get("account_title")),
            reference=_text(row.get("reference")),
            trace_bsb=_text(row.get("trace_bsb")),
            trace_account=_text(row.get("trace_account")),
            remitter=_text(row.get("remitter")),
            tax=_text(row.get("tax")),
            tax_amount=_amount(row.get("tax_amount")),
        )


@dataclass(frozen=True)
class FooterTotals:
    """File totals in cents"""

    net: int
    credit: int
    debit: int
    count: int


def _blank(value):
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _text(value):
    return "" if _blank(value) else str(value)


def _amount(value):
    return 0 if _blank(value) else value


def _code(value):
    if _blank(value):
        return None
    # Anything but a whole number is kept as given and rejected when rendered
    number = whole_number(value)
    return value if number is None else number


class ABA:
    """Builds ABA files for one originating account"""

    def __init__(self, config=None, **options):
        self.config = config if config is not None else BatchConfig(**options)

    def _timestamp(self):
        config = self.config
        if isinstance(config.time, datetime):
            return config.time
        day = config.date or date.today()
        if config.time is not None:
            return datetime.combine(day, config.time)
        return day

    def get_header(self):
        config = self.config
        stamp = self._timestamp()
        return {
            "bsb": format_bsb(config.bsb),
            "account": config.account,
            "bank": config.bank,
            "user_name": config.user_name,
            "user_number": config.user_number,
            "description": config.description,
            "date": format_date(stamp),
            # A date on its own does not imply midnight
            "time": format_time(stamp if config.time is not None else None),
        }

    def format_header(self):
        return render_record(HEADER_LAYOUT, self.get_header())

    def format_transaction(self, transaction):
        return render_record(DETAIL_LAYOUT, {
            "bsb": format_bsb(transaction.bsb),
            "account": (transaction.account or "").strip(),
            "tax": transaction.tax or "",
            "transaction_code": transaction.transaction_code,
            "amount": to_cents(transaction.amount),
            "account_title": transaction.account_title,
            "reference": transaction.reference,
            "trace_bsb": format_bsb(transaction.trace_bsb),
            "trace_account": transaction.trace_account,
            "remitter": transaction.remitter,
            "tax_amount": to_cents(transaction.tax_amount),
        })

    def get_footer(self, transactions):
        """Totals for the file total record.

        Only credit (50) and debit (13) transactions add to the totals, but
        every transaction counts towards the record count. The net total is
        the difference between credits and debits and is never negative.
        """
        credit = sum_amounts(t.amount for t in transactions if t.transaction_code == CREDIT)
        debit = sum_amounts(t.amount for t in transactions if t.transaction_code == DEBIT)
        return FooterTotals(
            net=to_cents(difference(credit, debit)),
            credit=to_cents(credit),
            debit=to_cents(debit),
            count=len(transactions),
        )

    def format_footer(self, transactions, totals=None):
        if totals is None:
            totals = self.get_footer(transactions)
        return render_record(FOOTER_LAYOUT, asdict(totals))

    def generate(self, transactions=()):
        """Return the complete ABA file content"""
        transactions = [
            t if isinstance(t, Transaction) else Transaction.from_mapping(t)
            for t in transactions
        ]
        # ABA requires at least one detail record
        if not transactions:
            logger.debug("Rejected empty batch", extra={"bank": self.config.bank})
            raise EmptyBatchError()

        header = self.format_header()
        details = [self.format_transaction(t) for t in transactions]
        totals = self.get_footer(transactions)
        footer = self.format_footer(transactions, totals)

        logger.info(
            "ABA file generated",
            extra={
                "bank": self.config.bank,
                "record_count": totals.count,
                "credit_total_cents": totals.credit,
                "debit_total_cents": totals.debit,
                "net_total_cents": totals.net,
            },
        )
        return LINE_TERMINATOR.join([header, *details, footer])


def generate(config, transactions):
    """Generate ABA file content for a batch of transactions"""
    return ABA(config).generate(transactions)
