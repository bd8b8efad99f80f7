"""
Per-holder burn ledger.
"""
from burn_boost import boost


class UserBurnLedger:
    """Cumulative amount one holder has burned of one token."""

    def __init__(self, data: dict):
        self.holder = bytes(data['holder'])
        self.mint = bytes(data['mint'])
        self.burned_amount = int(data['burned_amount'])
        if self.burned_amount < 0:
            raise ValueError("burned_amount cannot be negative")

    @classmethod
    def empty(cls, holder: bytes, mint: bytes) -> 'UserBurnLedger':
        return cls({'holder': holder, 'mint': mint, 'burned_amount': 0})

    def to_dict(self) -> dict:
        return {
            'holder': self.holder,
            'mint': self.mint,
            'burned_amount': self.burned_amount,
        }

    def record_burn(self, amount: int):
        self.burned_amount = boost.checked_add(self.burned_amount, amount, "burned_amount")

    def __repr__(self) -> str:
        return f"UserBurnLedger(holder={self.holder.hex()[:8]}, burned={self.burned_amount})"
