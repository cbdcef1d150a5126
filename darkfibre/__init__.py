"""Python client for the Darkfibre Solana DEX API."""

from darkfibre.client import DarkfibreClient
from darkfibre.core.errors import APIError, DarkfibreError, SigningError, ValidationError
from darkfibre.core.structures.structures import (
    BuyOptions,
    Priority,
    ProfileResult,
    RegisterResult,
    SellOptions,
    SwapMode,
    SwapOptions,
    TradeAmounts,
    TradeEstimates,
    TransactionResult,
)
from darkfibre.integrations.darkfibre.darkfibre_constants import DEFAULT_BASE_URL

__all__ = [
    "DarkfibreClient",
    "DEFAULT_BASE_URL",
    "DarkfibreError",
    "APIError",
    "SigningError",
    "ValidationError",
    "BuyOptions",
    "SellOptions",
    "SwapOptions",
    "Priority",
    "SwapMode",
    "TradeAmounts",
    "TradeEstimates",
    "TransactionResult",
    "ProfileResult",
    "RegisterResult",
]
