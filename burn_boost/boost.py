"""
Boost calculation: burn totals to basis points, multipliers and market cap.

All functions are pure. Counters are unsigned 64-bit quantities; every
product is formed before the division and range-checked afterwards.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation

from burn_boost.errors import Overflow, InsufficientSupply, ZeroSupplyError, ValidationError

# Basis points: 10000 bp = 100%
BASIS_POINTS = 10_000
BASE_MULTIPLIER = 10_000

# 0.1% boost for every 1% burned, capped at 50%
BOOST_NUMERATOR = 10
BOOST_DENOMINATOR = 100
MAX_BOOST = 5_000
MAX_MULTIPLIER = BASE_MULTIPLIER + MAX_BOOST

U64_MAX = 2 ** 64 - 1


def _check_u64(value: int, what: str) -> int:
    if value < 0 or value > U64_MAX:
        raise Overflow(f"{what} out of u64 range: {value}")
    return value


def checked_add(a: int, b: int, what: str = "addition") -> int:
    """Add two counters, raising Overflow instead of wrapping."""
    return _check_u64(a + b, what)


def checked_sub(a: int, b: int) -> int:
    """
    Subtract from a counter.

    Raises InsufficientSupply when b exceeds a.
    """
    if b > a:
        raise InsufficientSupply(requested=b, available=a)
    return a - b


def checked_mul(a: int, b: int, what: str = "multiplication") -> int:
    return _check_u64(a * b, what)


def burned_percentage(total_burned: int, initial_supply: int) -> int:
    """
    Fraction of the initial supply that has been burned, in basis points.

    Formula: floor(total_burned * 10000 / initial_supply)
    """
    if initial_supply == 0:
        raise ZeroSupplyError("initial_supply is zero")
    return _check_u64(total_burned * BASIS_POINTS // initial_supply, "burned percentage")


def remaining_supply_percentage(current_supply: int, initial_supply: int) -> int:
    """Fraction of the initial supply still in circulation, in basis points."""
    if initial_supply == 0:
        raise ZeroSupplyError("initial_supply is zero")
    return _check_u64(current_supply * BASIS_POINTS // initial_supply, "remaining percentage")


def boost_amount(burned_percentage_bp: int) -> int:
    """Boost in basis points before it is added to the base multiplier."""
    boost = checked_mul(burned_percentage_bp, BOOST_NUMERATOR, "boost") // BOOST_DENOMINATOR
    return min(boost, MAX_BOOST)


def boost_multiplier(burned_percentage_bp: int) -> int:
    """Multiplier in basis points: 10000 (no boost) up to 15000."""
    return BASE_MULTIPLIER + boost_amount(burned_percentage_bp)


def current_market_cap(base_market_cap: int, multiplier_bp: int) -> int:
    return _check_u64(base_market_cap * multiplier_bp // BASIS_POINTS, "market cap")


def boost_percentage(multiplier_bp: int) -> int:
    if multiplier_bp < BASE_MULTIPLIER:
        raise Overflow(f"multiplier {multiplier_bp} is below the base {BASE_MULTIPLIER}")
    return multiplier_bp - BASE_MULTIPLIER


@dataclass(frozen=True)
class BoostPreview:
    """Projected outcome of a hypothetical burn."""
    burned_percentage: int
    boost_bp: int
    multiplier_bp: int

    def to_dict(self) -> dict:
        return asdict(self)


def preview(total_burned: int, initial_supply: int, hypothetical_amount: int) -> BoostPreview:
    """
    Project the boost of burning `hypothetical_amount` on top of `total_burned`.

    The projected total is not clamped to `initial_supply`, so a hypothetical
    burn larger than the remaining supply reports more than 100% burned.
    """
    projected_total = checked_add(total_burned, hypothetical_amount, "projected total burned")
    percentage = burned_percentage(projected_total, initial_supply)
    return BoostPreview(
        burned_percentage=percentage,
        boost_bp=boost_amount(percentage),
        multiplier_bp=boost_multiplier(percentage),
    )


# ==============================================================================
# DISPLAY HELPERS
# ==============================================================================

def tokens_to_base_units(tokens, decimals: int) -> int:
    """
    Convert a whole/decimal token amount to integer base units.

    Raises ValidationError for anything that is not a finite number or
    that has more decimal places than the token supports.
    """
    try:
        scaled = Decimal(str(tokens)).scaleb(decimals)
    except InvalidOperation:
        raise ValidationError(f"Not a number: {tokens!r}") from None
    if not scaled.is_finite():
        raise ValidationError(f"Amount must be finite, got {tokens!r}")
    if scaled != scaled.to_integral_value():
        raise ValidationError(f"{tokens} is smaller than one base unit or has more than {decimals} decimal places")
    return int(scaled)


def base_units_to_tokens(amount: int, decimals: int):
    return Decimal(amount) / (Decimal(10) ** decimals)


def format_token_amount(amount: int, decimals: int) -> str:
    tokens = base_units_to_tokens(amount, decimals)
    return f"{tokens:,.{min(decimals, 2)}f}"


def format_bp(value_bp: int) -> str:
    """Render basis points as a percentage string, e.g. 1050 -> '10.50%'."""
    return f"{value_bp // 100}.{value_bp % 100:02d}%"
