from __future__ import annotations

from typing import Optional, Union

from darkfibre.core.errors import ValidationError
from darkfibre.core.onchain.solana_signer import TransactionSigner
from darkfibre.core.structures.structures import (
    BuildResult,
    BuyOptions,
    SellOptions,
    SubmitRequest,
    SubmitResult,
    SwapOptions,
    TradeAmounts,
    TransactionResult,
)
from darkfibre.integrations.darkfibre.darkfibre_constants import (
    BUY_ENDPOINT,
    SELL_ENDPOINT,
    SUBMIT_ENDPOINT,
    SWAP_ENDPOINT,
)
from darkfibre.integrations.darkfibre.darkfibre_helpers import _unwrap_data
from darkfibre.integrations.darkfibre.darkfibre_http import DarkfibreHttpClient
from darkfibre.logging.logger import get_logger

log = get_logger(__name__)

TradeOptions = Union[BuyOptions, SellOptions, SwapOptions]


def validate_price_impact(price_impact: float, max_price_impact: Optional[float]) -> None:
    """Raise ValidationError when the quoted price impact exceeds the caller's ceiling."""
    if max_price_impact is not None and price_impact > max_price_impact:
        raise ValidationError(
            f"Price impact {price_impact * 100:.2f}% exceeds maximum allowed {max_price_impact * 100:.2f}%",
            field="maxPriceImpact",
        )


def validate_priority_cost(priority_cost: float, max_priority_cost: Optional[float]) -> None:
    """Raise ValidationError when the quoted priority fee (SOL) exceeds the caller's ceiling."""
    if max_priority_cost is not None and priority_cost > max_priority_cost:
        raise ValidationError(
            f"Priority cost {priority_cost} SOL exceeds maximum allowed {max_priority_cost} SOL",
            field="maxPriorityCost",
        )


def merge_transaction_result(build: BuildResult, submit: SubmitResult) -> TransactionResult:
    """
    Combine the submit outcome with the build quote.

    Estimated amounts stand in when the backend could not parse the settled
    amounts, and the priority cost is always the quoted (validated) one.
    """
    trade_result = submit.trade_result
    if trade_result is None:
        trade_result = TradeAmounts(
            input_amount=build.estimates.input_amount,
            output_amount=build.estimates.output_amount,
        )
    return TransactionResult(
        signature=submit.signature,
        status=submit.status,
        slot=submit.slot,
        platform=submit.platform,
        input_mint=submit.input_mint,
        output_mint=submit.output_mint,
        trade_result=trade_result,
        priority_cost=build.priority_cost,
    )


class TradeService:
    """
    Build, check, sign and submit trades.

    Every trade runs the same strictly ordered pipeline:
      1. POST the options to the build endpoint and receive an unsigned transaction
      2. check price impact and priority cost against the caller's limits
      3. sign locally
      4. POST the signed transaction to /tx/submit
    Nothing is retried; the first failure aborts the trade.
    """

    def __init__(self, http_client: DarkfibreHttpClient, signer: TransactionSigner) -> None:
        self.http_client = http_client
        self.signer = signer

    async def buy(self, options: BuyOptions) -> TransactionResult:
        """Buy a token with SOL."""
        return await self._execute(BUY_ENDPOINT, options)

    async def sell(self, options: SellOptions) -> TransactionResult:
        """Sell a token for SOL."""
        return await self._execute(SELL_ENDPOINT, options)

    async def swap(self, options: SwapOptions) -> TransactionResult:
        """Swap between two mints (either may be 'SOL')."""
        return await self._execute(SWAP_ENDPOINT, options)

    async def _execute(self, build_path: str, options: TradeOptions) -> TransactionResult:
        build_body = await self.http_client.post(build_path, options.to_payload())
        build = BuildResult.model_validate(_unwrap_data(build_body))
        log.debug(
            "[DARKFIBRE][TRADE][BUILD] path=%s platform=%s in=%s out=%s impact=%.6f priority_cost=%s expires=%s",
            build_path,
            build.platform,
            build.input_mint,
            build.output_mint,
            build.estimates.price_impact,
            build.priority_cost,
            build.expires_at,
        )

        # Limits are checked on the exact quote, before anything is signed
        validate_price_impact(build.estimates.price_impact, options.max_price_impact)
        validate_priority_cost(build.priority_cost, options.max_priority_cost)

        signed_transaction = self.signer.sign_transaction(build.unsigned_transaction)

        submit_request = SubmitRequest(
            submission_token=build.submission_token,
            signed_transaction=signed_transaction,
        )
        submit_body = await self.http_client.post(SUBMIT_ENDPOINT, submit_request.to_payload())
        submit = SubmitResult.model_validate(_unwrap_data(submit_body))

        if submit.trade_result is None:
            log.debug("[DARKFIBRE][TRADE][SUBMIT] No parsed trade result for %s, using build estimates.",
                      submit.signature)

        result = merge_transaction_result(build, submit)
        log.info(
            "[DARKFIBRE][TRADE][DONE] path=%s signature=%s status=%s slot=%d in=%s out=%s",
            build_path,
            result.signature,
            result.status,
            result.slot,
            result.trade_result.input_amount,
            result.trade_result.output_amount,
        )
        return result
