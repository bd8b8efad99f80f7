"""
Error taxonomy for the burn/boost program.

Every failure is a named, typed condition. Nothing here is retried
automatically; callers decide whether to resubmit.
"""


class BurnBoostError(Exception):
    """Base class for all program errors."""
    pass


# ==============================================================================
# VALIDATION (checked before any mutation begins)
# ==============================================================================

class ValidationError(BurnBoostError):
    """Raised when validation fails."""
    pass


class InvalidBurnAmount(ValidationError):
    def __init__(self, amount):
        self.amount = amount
        super().__init__(f"Burn amount must be greater than zero, got {amount!r}")


class FieldTooLong(ValidationError):
    def __init__(self, field: str, length: int, max_length: int):
        self.field = field
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"{field} is {length} characters, maximum is {max_length}"
        )


class InvalidTokenParameters(ValidationError):
    pass


class InvalidInstruction(ValidationError):
    pass


# ==============================================================================
# AUTHORIZATION
# ==============================================================================

class AuthorizationError(BurnBoostError):
    """Raised when a signer is not allowed to perform an operation."""
    pass


class InvalidNonce(AuthorizationError):
    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Invalid nonce. Expected {expected}, got {got}")


# ==============================================================================
# STATE
# ==============================================================================

class StateError(BurnBoostError):
    pass


class AlreadyInitialized(StateError):
    def __init__(self, token_id: bytes):
        self.token_id = token_id
        super().__init__(f"Token {token_id.hex()} is already initialized")


class NotFound(StateError):
    def __init__(self, token_id: bytes):
        self.token_id = token_id
        super().__init__(f"Token {token_id.hex()} does not exist")


class CorruptStateError(StateError):
    """A stored record violates one of its invariants."""
    pass


# ==============================================================================
# ARITHMETIC
# ==============================================================================

class CounterArithmeticError(BurnBoostError, ArithmeticError):
    """Checked counter arithmetic failed. The enclosing transaction aborts."""
    pass


class Overflow(CounterArithmeticError):
    pass


class InsufficientSupply(CounterArithmeticError):
    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot burn {requested}: only {available} remains in supply"
        )


class ZeroSupplyError(CounterArithmeticError):
    pass


# ==============================================================================
# TOKEN LEDGER
# ==============================================================================

class LedgerError(BurnBoostError):
    """Raised by the token ledger service."""
    pass


class InsufficientBalance(LedgerError):
    def __init__(self, requested: int, balance: int):
        self.requested = requested
        self.balance = balance
        super().__init__(f"Insufficient balance: requested {requested}, have {balance}")


class Unauthorized(LedgerError):
    pass


class AccountNotFound(LedgerError):
    pass


class MintSupplyMismatch(LedgerError):
    """The mint record holds less supply than the accounts drawing on it."""
    pass


# ==============================================================================
# EXTERNAL CALLS
# ==============================================================================

class ExternalError(BurnBoostError):
    """Wraps a failure raised by an external collaborator."""

    def __init__(self, message: str, cause: Exception):
        self.cause = cause
        super().__init__(f"{message}: {cause}")


class ExternalBurnFailed(ExternalError):
    def __init__(self, cause: Exception):
        super().__init__("External burn failed", cause)


class ExternalMintFailed(ExternalError):
    def __init__(self, cause: Exception):
        super().__init__("External mint failed", cause)
