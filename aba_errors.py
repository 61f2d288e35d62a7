"""Exceptions raised while building ABA files"""


class ABAError(Exception):
    """Base exception for ABA file generation"""

    pass


class EmptyBatchError(ABAError):
    """Batch has no transactions; ABA requires at least one detail record"""

    def __init__(self, message="Please pass in at least one payment"):
        super().__init__(message)


class FieldOverflowError(ABAError, ValueError):
    """Numeric value cannot be represented in its fixed-width field"""

    def __init__(self, field, value, width):
        self.field = field
        self.value = value
        self.width = width
        super().__init__(f"{field} value {value!r} does not fit in {width} digits")


class InvalidAmountError(ABAError, ValueError):
    """Amount is not a decimal number"""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid amount: {value!r}")


class InvalidFieldError(ABAError, ValueError):
    """Numeric field value is not a whole number"""

    def __init__(self, field, value):
        self.field = field
        self.value = value
        super().__init__(f"{field} value {value!r} is not a whole number")
