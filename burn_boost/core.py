"""
Signed instructions submitted to the burn/boost program.
"""
import time
import msgpack
from typing import Optional
from .crypto import ADDRESS_LENGTH, generate_hash, public_key_to_address, sign, verify_signature

INITIALIZE = "INITIALIZE"
BURN = "BURN"
TRANSFER = "TRANSFER"

INSTRUCTION_TYPES = (INITIALIZE, BURN, TRANSFER)

REQUIRED_FIELDS = {
    INITIALIZE: ('token_id', 'name', 'symbol', 'decimals', 'initial_supply', 'base_market_cap'),
    BURN: ('token_id', 'amount'),
    TRANSFER: ('token_id', 'to', 'amount'),
}


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_address(value) -> bool:
    return isinstance(value, bytes) and len(value) == ADDRESS_LENGTH


class Instruction:
    def __init__(self,
                 sender_public_key: str,
                 ix_type: str,
                 data: dict,
                 nonce: int,
                 signature: Optional[bytes] = None,
                 timestamp: Optional[float] = None):
        self.sender_public_key = sender_public_key
        self.ix_type = ix_type
        self.data = data
        self.nonce = nonce
        self.timestamp = timestamp or time.time()
        self.signature = signature

    @classmethod
    def from_dict(cls, data: dict):
        """Creates an Instruction from a dictionary."""
        signature = data.get("signature")
        if isinstance(signature, str):
            signature = bytes.fromhex(signature)
        return cls(
            sender_public_key=data["sender_public_key"],
            ix_type=data["ix_type"],
            data=data["data"],
            nonce=data["nonce"],
            signature=signature,
            timestamp=data.get("timestamp"),
        )

    def to_dict(self, include_signature=True):
        data = {
            "sender_public_key": self.sender_public_key,
            "ix_type": self.ix_type,
            "data": self.data,
            "nonce": self.nonce,
            "timestamp": self.timestamp,
        }
        if include_signature and self.signature:
            data["signature"] = self.signature
        return data

    def get_signing_data(self) -> bytes:
        """Returns the canonical byte representation for signing."""
        return msgpack.packb(self.to_dict(include_signature=False), use_bin_type=True)

    def sign(self, private_key):
        self.signature = sign(private_key, self.get_signing_data())

    def verify_signature(self) -> bool:
        if not self.signature:
            return False
        return verify_signature(
            self.sender_public_key,
            self.signature,
            self.get_signing_data()
        )

    @property
    def sender_address(self) -> bytes:
        return public_key_to_address(self.sender_public_key)

    @property
    def id(self) -> bytes:
        """The unique hash identifier of the instruction."""
        return generate_hash(self.get_signing_data())

    def validate_basic(self) -> tuple[bool, str]:
        """
        Shape checks that need no state.
        Returns (is_valid, error_message)
        """
        if self.ix_type not in INSTRUCTION_TYPES:
            return False, f"Unknown instruction type: {self.ix_type}"

        if not _is_int(self.nonce) or self.nonce < 0:
            return False, "Nonce must be a non-negative integer"

        if self.timestamp > time.time() + 300:  # 5 minutes tolerance
            return False, "Timestamp too far in future"

        if not isinstance(self.data, dict):
            return False, "Instruction data must be a mapping"

        required = REQUIRED_FIELDS[self.ix_type]
        missing = [key for key in required if key not in self.data]
        if missing:
            return False, f"{self.ix_type} requires {', '.join(missing)}"

        for key in ('token_id', 'to'):
            if key in required and not _is_address(self.data[key]):
                return False, f"'{key}' must be {ADDRESS_LENGTH} bytes"

        for key in ('name', 'symbol'):
            if key in required and not isinstance(self.data[key], str):
                return False, f"'{key}' must be a string"

        for key in ('decimals', 'initial_supply', 'base_market_cap', 'amount'):
            if key in required and not _is_int(self.data[key]):
                return False, f"'{key}' must be an integer"

        if self.ix_type == TRANSFER and self.data['amount'] <= 0:
            return False, "Transfer amount must be a positive integer"

        return True, ""
