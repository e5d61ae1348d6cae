"""Reserve engine error classes.

Each error carries a stable numeric code so callers (and the HTTP layer)
can report aborts the way the hosting runtime reports abort codes.
"""


class ReserveError(Exception):
    """Base error for reserve engine operations."""

    code: int = 0

    @property
    def name(self) -> str:
        return type(self).__name__


class InsufficientAmount(ReserveError):
    """Deposit or computed payout is below the minimum trade floor."""

    code = 1


class InsufficientBacking(ReserveError):
    """Pool has zero supply or zero backing, so the curve ratio is undefined."""

    code = 2


class InsufficientOutput(ReserveError):
    """Computed mint amount rounds down to zero tokens."""

    code = 3


class InvalidAmount(ReserveError):
    """Token amount is zero or exceeds the outstanding supply."""

    code = 4


class PriceViolation(ReserveError):
    """Post-operation price would be lower than the last recorded price."""

    code = 5


class AlreadyInitialized(ReserveError):
    """Fee collector has already been set."""

    code = 6


class InvalidAddress(ReserveError):
    """Address is malformed or is the null sentinel."""

    code = 7


class NotAuthorized(ReserveError):
    """Admin call from someone other than the current authority."""

    code = 8


class NotInitialized(ReserveError):
    """Mint or burn attempted before a fee collector was configured."""

    code = 9


class ArithmeticFault(ReserveError, ArithmeticError):
    """Base class for SafeInt arithmetic errors."""

    code = 10


class Overflow(ArithmeticFault):
    """Value does not fit in the target integer width."""

    code = 10


class Underflow(ArithmeticFault):
    """Subtraction would produce a negative result."""

    code = 11


class DivisionByZero(ArithmeticFault):
    """Division by zero."""

    code = 12
