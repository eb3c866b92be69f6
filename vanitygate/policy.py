"""
Payment policy: lamport/SOL conversion and the minimum payment threshold.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

LAMPORTS_PER_SOL = 1_000_000_000
# Largest amount the signed 64-bit amount column can hold.
MAX_LAMPORTS = 2 ** 63 - 1
# Width of the stored requested word; configured limits are capped to it.
MAX_WORD_LENGTH = 32


def lamports_to_sol(lamports: int) -> Decimal:
    """Exact decimal SOL value of an integer lamport amount."""
    return Decimal(int(lamports)) / Decimal(LAMPORTS_PER_SOL)


@dataclass(frozen=True)
class PaymentPolicy:
    min_payment_lamports: int
    treasury_address: Optional[str] = None
    max_word_length: int = 6

    def is_paid(self, amount_lamports: int) -> bool:
        # Compare in lamports so 0.1 SOL is never lost to float rounding.
        return int(amount_lamports) >= self.min_payment_lamports

    @property
    def min_payment_sol(self) -> Decimal:
        return lamports_to_sol(self.min_payment_lamports)

    @classmethod
    def from_settings(cls, settings) -> 'PaymentPolicy':
        return cls(
            min_payment_lamports=getattr(settings, 'VANITY_MIN_PAYMENT_LAMPORTS', 100_000_000),
            treasury_address=getattr(settings, 'VANITY_TREASURY_ADDRESS', '') or None,
            max_word_length=min(
                getattr(settings, 'VANITY_MAX_WORD_LENGTH', 6),
                MAX_WORD_LENGTH,
            ),
        )
