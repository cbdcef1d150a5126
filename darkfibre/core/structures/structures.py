from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Priority(str, Enum):
    """Fee/speed tier the backend maps to a compute-unit price policy."""
    ECONOMY = "economy"
    FAST = "fast"
    FASTER = "faster"
    FASTEST = "fastest"


class SwapMode(str, Enum):
    """How the `amount` of a swap is interpreted."""
    EXACT_IN = "exactIn"
    EXACT_OUT = "exactOut"


class _WireModel(BaseModel):
    """Immutable model with camelCase wire aliases; accepts either naming on input."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    def to_payload(self) -> Dict[str, Any]:
        """JSON body as sent to the API: camelCase keys, unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# -------- Requests -------- #

class _TradeOptions(_WireModel):
    slippage: float = Field(..., ge=0, lt=1, description="Slippage tolerance, e.g. 0.01 for 1%.")
    priority: Priority = Field(..., description="Transaction priority level.")
    max_price_impact: Optional[float] = Field(
        None,
        alias="maxPriceImpact",
        ge=0,
        description="Abort before signing if the estimated price impact exceeds this fraction.",
    )
    max_priority_cost: Optional[float] = Field(
        None,
        alias="maxPriorityCost",
        ge=0,
        description="Abort before signing if the quoted priority fee exceeds this amount of SOL.",
    )


class BuyOptions(_TradeOptions):
    """Buy `mint` spending `sol_amount` SOL."""
    mint: str = Field(..., min_length=1)
    sol_amount: float = Field(..., alias="solAmount", gt=0)


class SellOptions(_TradeOptions):
    """Sell `token_amount` of `mint` for SOL."""
    mint: str = Field(..., min_length=1)
    token_amount: float = Field(..., alias="tokenAmount", gt=0)


class SwapOptions(_TradeOptions):
    """Generic swap; mints may be the literal 'SOL' for native SOL."""
    input_mint: str = Field(..., alias="inputMint", min_length=1)
    output_mint: str = Field(..., alias="outputMint", min_length=1)
    amount: float = Field(..., gt=0)
    swap_mode: SwapMode = Field(..., alias="swapMode")


class SubmitRequest(_WireModel):
    submission_token: str = Field(..., alias="submissionToken")
    signed_transaction: str = Field(..., alias="signedTransaction")


class RegisterRequest(_WireModel):
    wallet_address: str = Field(..., alias="walletAddress")
    message: str = Field(..., description="'darkfibre:<unix millis>' as signed by the wallet.")
    signature: str = Field(..., description="Base58 Ed25519 signature of `message`.")


# -------- Responses -------- #

class TradeEstimates(_WireModel):
    input_amount: float = Field(..., alias="inputAmount")
    output_amount: float = Field(..., alias="outputAmount")
    price_impact: float = Field(..., alias="priceImpact", description="0.00346 means ~0.346%.")


class TradeAmounts(_WireModel):
    input_amount: float = Field(..., alias="inputAmount")
    output_amount: float = Field(..., alias="outputAmount")


class BuildResult(_WireModel):
    """Unsigned transaction quoted by /tx/buy, /tx/sell or /tx/swap. Consumed once."""
    submission_token: str = Field(..., alias="submissionToken")
    unsigned_transaction: str = Field(..., alias="unsignedTransaction", description="Base64 wire transaction.")
    expires_at: str = Field(..., alias="expiresAt", description="ISO 8601 expiry of the submission token.")
    platform: str
    input_mint: str = Field(..., alias="inputMint")
    output_mint: str = Field(..., alias="outputMint")
    estimates: TradeEstimates
    priority_cost: float = Field(..., alias="priorityCost", description="Quoted priority fee in SOL.")


class SubmitResult(_WireModel):
    signature: str
    status: str
    slot: int
    platform: str
    input_mint: str = Field(..., alias="inputMint")
    output_mint: str = Field(..., alias="outputMint")
    trade_result: Optional[TradeAmounts] = Field(
        None,
        alias="tradeResult",
        description="Null when the backend could not parse the settled amounts.",
    )
    priority_cost: float = Field(..., alias="priorityCost")


class TransactionResult(_WireModel):
    """Client-facing outcome of a trade; `trade_result` is always present."""
    signature: str
    status: str
    slot: int
    platform: str
    input_mint: str = Field(..., alias="inputMint")
    output_mint: str = Field(..., alias="outputMint")
    trade_result: TradeAmounts = Field(..., alias="tradeResult")
    priority_cost: float = Field(..., alias="priorityCost", description="Build-phase (validated) priority fee.")


class ProfileVolume(_WireModel):
    sol_30d: float = Field(..., alias="sol30d")
    trades_30d: int = Field(..., alias="trades30d")


class ProfileFee(_WireModel):
    bps: int
    decimal: float
    next_bps: Optional[int] = Field(None, alias="nextBps", description="Null at the top tier.")
    next_threshold_sol: Optional[float] = Field(None, alias="nextThresholdSol", description="Null at the top tier.")


class ProfileResult(_WireModel):
    wallet_address: str = Field(..., alias="walletAddress")
    created_at: str = Field(..., alias="createdAt")
    volume: ProfileVolume
    fee: ProfileFee


class RegisterResult(_WireModel):
    """
    Credentials issued by /auth/register.

    The API key is only returned once. The client never stores it; persisting
    it is the caller's responsibility.
    """
    api_key: str = Field(..., alias="apiKey")
    wallet_address: str = Field(..., alias="walletAddress")
