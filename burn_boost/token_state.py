"""
Global token state - the single authoritative record per token.
"""
from burn_boost import boost
from burn_boost.errors import CorruptStateError

MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 16


class GlobalTokenState:
    """
    Aggregate supply/burn/boost counters for one token.

    Invariants (checked on load and before every write):
        current_supply + total_burned == initial_supply
        0 <= total_burned <= initial_supply
        current_boost_multiplier == boost_multiplier(burned_percentage)
    """

    def __init__(self, data: dict):
        """
        Initialize token state.

        Args:
            data: Dict as produced by to_dict()
        """
        self.authority = bytes(data['authority'])
        self.mint = bytes(data['mint'])
        self.name = data['name']
        self.symbol = data['symbol']
        self.decimals = int(data['decimals'])
        self.initial_supply = int(data['initial_supply'])
        self.current_supply = int(data['current_supply'])
        self.total_burned = int(data['total_burned'])
        self.base_market_cap = int(data['base_market_cap'])
        self.current_boost_multiplier = int(data['current_boost_multiplier'])
        self.burn_transaction_count = int(data['burn_transaction_count'])
        self.validate()

    @classmethod
    def new(cls, authority: bytes, mint: bytes, name: str, symbol: str,
            decimals: int, initial_supply: int, base_market_cap: int) -> 'GlobalTokenState':
        """Fresh state: nothing burned, no boost."""
        return cls({
            'authority': authority,
            'mint': mint,
            'name': name,
            'symbol': symbol,
            'decimals': decimals,
            'initial_supply': initial_supply,
            'current_supply': initial_supply,
            'total_burned': 0,
            'base_market_cap': base_market_cap,
            'current_boost_multiplier': boost.BASE_MULTIPLIER,
            'burn_transaction_count': 0,
        })

    def to_dict(self) -> dict:
        """
        Convert to dict for storage.
        """
        return {
            'authority': self.authority,
            'mint': self.mint,
            'name': self.name,
            'symbol': self.symbol,
            'decimals': self.decimals,
            'initial_supply': self.initial_supply,
            'current_supply': self.current_supply,
            'total_burned': self.total_burned,
            'base_market_cap': self.base_market_cap,
            'current_boost_multiplier': self.current_boost_multiplier,
            'burn_transaction_count': self.burn_transaction_count,
        }

    @property
    def burned_percentage(self) -> int:
        return boost.burned_percentage(self.total_burned, self.initial_supply)

    @property
    def current_market_cap(self) -> int:
        return boost.current_market_cap(self.base_market_cap, self.current_boost_multiplier)

    @property
    def boost_percentage(self) -> int:
        return boost.boost_percentage(self.current_boost_multiplier)

    def apply_burn(self, amount: int) -> int:
        """
        Move the counters for one burn of `amount`.

        Returns the multiplier held before the burn. Raises Overflow or
        InsufficientSupply and leaves the object untouched on failure.
        """
        total_burned = boost.checked_add(self.total_burned, amount, "total_burned")
        current_supply = boost.checked_sub(self.current_supply, amount)
        count = boost.checked_add(self.burn_transaction_count, 1, "burn_transaction_count")

        old_multiplier = self.current_boost_multiplier
        self.total_burned = total_burned
        self.current_supply = current_supply
        self.burn_transaction_count = count
        self.current_boost_multiplier = boost.boost_multiplier(self.burned_percentage)
        return old_multiplier

    def validate(self):
        """Ensure state consistency."""
        for field in ('initial_supply', 'current_supply', 'total_burned',
                      'base_market_cap', 'burn_transaction_count'):
            value = getattr(self, field)
            if value < 0 or value > boost.U64_MAX:
                raise CorruptStateError(f"{field} out of range: {value}")

        if self.initial_supply == 0:
            raise CorruptStateError("initial_supply is zero")

        if self.current_supply + self.total_burned != self.initial_supply:
            raise CorruptStateError(
                f"Supply mismatch: current {self.current_supply} + burned "
                f"{self.total_burned} != initial {self.initial_supply}"
            )

        expected = boost.boost_multiplier(self.burned_percentage)
        if self.current_boost_multiplier != expected:
            raise CorruptStateError(
                f"Multiplier {self.current_boost_multiplier} does not match "
                f"burned percentage (expected {expected})"
            )

    def __repr__(self) -> str:
        return (
            f"GlobalTokenState("
            f"symbol={self.symbol}, "
            f"supply={self.current_supply}/{self.initial_supply}, "
            f"burned={self.total_burned}, "
            f"multiplier={self.current_boost_multiplier}bp, "
            f"burns={self.burn_transaction_count})"
        )
