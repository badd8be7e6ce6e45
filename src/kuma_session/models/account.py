"""
Account-related models.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class WalletSnapshot:
    """Balance summary shown to the user."""
    balance: Decimal
    free_collateral: Decimal
    used_balance: Decimal
