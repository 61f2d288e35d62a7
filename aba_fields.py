"""Fixed-width field formatting for ABA records.

Every ABA record is a run of fixed-width fields. Text fields are space padded
and silently truncated, numeric fields are zero filled and never truncated
(dropping digits from an amount or a count would corrupt the file totals).
Money is handled as ``Decimal`` and converted to whole cents only when a field
is rendered.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from aba_errors import FieldOverflowError, InvalidAmountError, InvalidFieldError

CENT = Decimal("0.01")

LEFT = "left"
RIGHT = "right"


@dataclass(frozen=True)
class Field:
    """One fixed-width field of a record layout"""

    name: str
    width: int
    justify: str = LEFT
    pad: str = " "
    numeric: bool = False
    literal: str = None


def reserved(width, name="reserved"):
    """Blank filler field"""
    return Field(name, width, literal=" " * width)


def format_bsb(code):
    """Format a BSB as NNN-NNN, blank when no BSB is given"""
    value = "".join(ch for ch in (code or "") if not ch.isspace() and ch != "-")
    if not value:
        return " " * 7
    return f"{value[:3]}-{value[3:6]}".ljust(7)


def format_text(value, width, justify=LEFT, pad=" "):
    """Pad text to width, truncating anything longer"""
    text = "" if value is None else str(value)
    text = text[:width]
    if justify == RIGHT:
        return text.rjust(width, pad)
    return text.ljust(width, pad)


def whole_number(value):
    """Integer value of an integral number or numeric string, else None"""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite() or number != number.to_integral_value():
        return None
    return int(number)


def format_numeric(value, width, field="value"):
    """Zero-fill a non-negative integer to width digits"""
    number = whole_number(value)
    if number is None:
        raise InvalidFieldError(field, value)
    if number < 0 or len(str(number)) > width:
        raise FieldOverflowError(field, value, width)
    return f"{number:0{width}d}"


def to_decimal(value):
    """Read an amount as an exact Decimal"""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        # repr of a plain float is its shortest round-tripping form, so 1337.42
        # stays 1337.42; numpy floats are converted first
        amount = Decimal(repr(float(value)))
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmountError(value)
    if not amount.is_finite():
        raise InvalidAmountError(value)
    return amount


def to_cents(amount=0):
    """Convert an amount to whole cents, rounding half away from zero"""
    try:
        rounded = to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError(amount)
    return int(rounded * 100)


def sum_amounts(values):
    """Exact decimal total of amounts, to the cent"""
    total = sum((to_decimal(value) for value in values), Decimal("0"))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def difference(credit, debit):
    """Absolute difference between two amounts"""
    return abs(to_decimal(credit) - to_decimal(debit))


def format_date(moment):
    """DDMMYY"""
    return moment.strftime("%d%m%y")


def format_time(moment):
    """HHMM, or blank when no time is given"""
    if moment is None:
        return " " * 4
    return moment.strftime("%H%M")


def render_field(field, values):
    if field.literal is not None:
        return format_text(field.literal, field.width)
    value = values.get(field.name)
    if field.numeric:
        return format_numeric(value, field.width, field.name)
    return format_text(value, field.width, field.justify, field.pad)


def render_record(layout, values):
    """Render a record from an ordered tuple of fields"""
    return "".join(render_field(field, values) for field in layout)
