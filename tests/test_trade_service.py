"""Unit tests for TradeService using mocked transport and signer."""

from unittest.mock import AsyncMock, MagicMock, call

import pytest

from darkfibre.core.errors import APIError, SigningError, ValidationError
from darkfibre.core.services.trade_service import (
    TradeService,
    merge_transaction_result,
    validate_price_impact,
    validate_priority_cost,
)
from darkfibre.core.structures.structures import (
    BuildResult,
    BuyOptions,
    SellOptions,
    SubmitResult,
    SwapOptions,
    TransactionResult,
)
from tests.factory_builders import SOL_MINT, TEST_TOKEN_MINT, build_response, submit_response


def _service(build_body: dict, submit_body: dict) -> tuple[TradeService, AsyncMock, MagicMock]:
    http_client = AsyncMock()
    http_client.post.side_effect = [build_body, submit_body]
    signer = MagicMock()
    signer.sign_transaction.return_value = "c2lnbmVk"
    return TradeService(http_client, signer), http_client, signer


def _buy(**overrides) -> BuyOptions:
    fields = {"mint": TEST_TOKEN_MINT, "sol_amount": 0.002, "slippage": 0.05, "priority": "fast"}
    fields.update(overrides)
    return BuyOptions(**fields)


class TestValidators:
    def test_price_impact_within_limit(self) -> None:
        validate_price_impact(0.01, 0.01)
        validate_price_impact(0.5, None)

    def test_price_impact_message(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_price_impact(0.01, 0.00001)
        assert exc_info.value.field == "maxPriceImpact"
        assert exc_info.value.message == "Price impact 1.00% exceeds maximum allowed 0.00%"

    def test_price_impact_two_decimals(self) -> None:
        with pytest.raises(ValidationError, match=r"Price impact 12\.35% exceeds maximum allowed 5\.00%"):
            validate_price_impact(0.12345, 0.05)

    def test_priority_cost_within_limit(self) -> None:
        validate_priority_cost(0.001, 0.001)
        validate_priority_cost(1.0, None)

    def test_priority_cost_message_in_sol(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            validate_priority_cost(0.0002, 0.0001)
        assert exc_info.value.field == "maxPriorityCost"
        assert exc_info.value.message == "Priority cost 0.0002 SOL exceeds maximum allowed 0.0001 SOL"

    def test_zero_limit_rejects_any_cost(self) -> None:
        with pytest.raises(ValidationError):
            validate_priority_cost(0.000001, 0.0)


class TestMerge:
    def test_uses_actual_trade_result(self) -> None:
        build = BuildResult.model_validate(build_response("dHg=")["data"])
        submit = SubmitResult.model_validate(
            submit_response(trade_result={"inputAmount": 0.002, "outputAmount": 70000.0})["data"]
        )
        result = merge_transaction_result(build, submit)
        assert result.trade_result.output_amount == 70000.0

    def test_falls_back_to_estimates(self) -> None:
        build = BuildResult.model_validate(build_response("dHg=")["data"])
        submit = SubmitResult.model_validate(submit_response(trade_result=None)["data"])
        result = merge_transaction_result(build, submit)
        assert result.trade_result.input_amount == build.estimates.input_amount
        assert result.trade_result.output_amount == build.estimates.output_amount

    def test_priority_cost_comes_from_build(self) -> None:
        build = BuildResult.model_validate(build_response("dHg=", priority_cost=0.00005)["data"])
        submit = SubmitResult.model_validate(submit_response(priority_cost=0.00004)["data"])
        assert merge_transaction_result(build, submit).priority_cost == 0.00005


class TestBuy:
    async def test_pipeline_order(self) -> None:
        svc, http_client, signer = _service(build_response("dW5zaWduZWQ="), submit_response())

        result = await svc.buy(_buy())

        assert isinstance(result, TransactionResult)
        assert http_client.post.await_args_list == [
            call("/tx/buy", {"mint": TEST_TOKEN_MINT, "solAmount": 0.002, "slippage": 0.05, "priority": "fast"}),
            call("/tx/submit", {"submissionToken": "sub_token_1", "signedTransaction": "c2lnbmVk"}),
        ]
        signer.sign_transaction.assert_called_once_with("dW5zaWduZWQ=")

    async def test_result_fields(self) -> None:
        svc, _, _ = _service(
            build_response("dHg=", priority_cost=0.00005),
            submit_response(trade_result={"inputAmount": 0.002, "outputAmount": 70500.0}),
        )

        result = await svc.buy(_buy())

        assert result.status == "confirmed"
        assert result.slot == 312_456_789
        assert result.platform == "pump_fun"
        assert result.input_mint == SOL_MINT
        assert result.output_mint == TEST_TOKEN_MINT
        assert result.trade_result.output_amount == 70500.0
        assert result.priority_cost == 0.00005

    async def test_limits_are_sent_to_backend(self) -> None:
        svc, http_client, _ = _service(build_response("dHg="), submit_response())

        await svc.buy(_buy(max_price_impact=0.05, max_priority_cost=0.001))

        build_payload = http_client.post.await_args_list[0].args[1]
        assert build_payload["maxPriceImpact"] == 0.05
        assert build_payload["maxPriorityCost"] == 0.001

    async def test_price_impact_exceeded_stops_before_signing(self) -> None:
        svc, http_client, signer = _service(build_response("dHg=", price_impact=0.01), submit_response())

        with pytest.raises(ValidationError) as exc_info:
            await svc.buy(_buy(max_price_impact=0.00001))

        assert exc_info.value.field == "maxPriceImpact"
        signer.sign_transaction.assert_not_called()
        assert [c.args[0] for c in http_client.post.await_args_list] == ["/tx/buy"]

    async def test_priority_cost_exceeded_stops_before_signing(self) -> None:
        svc, http_client, signer = _service(build_response("dHg=", priority_cost=0.01), submit_response())

        with pytest.raises(ValidationError) as exc_info:
            await svc.buy(_buy(max_priority_cost=0.0000001))

        assert exc_info.value.field == "maxPriorityCost"
        signer.sign_transaction.assert_not_called()
        assert http_client.post.await_count == 1

    async def test_price_impact_checked_before_priority_cost(self) -> None:
        svc, _, _ = _service(build_response("dHg=", price_impact=0.5, priority_cost=1.0), submit_response())

        with pytest.raises(ValidationError) as exc_info:
            await svc.buy(_buy(max_price_impact=0.1, max_priority_cost=0.1))

        assert exc_info.value.field == "maxPriceImpact"

    async def test_signing_error_propagates_without_submit(self) -> None:
        svc, http_client, signer = _service(build_response("dHg="), submit_response())
        original = SigningError("Failed to sign transaction", ValueError("bad"))
        signer.sign_transaction.side_effect = original

        with pytest.raises(SigningError) as exc_info:
            await svc.buy(_buy())

        assert exc_info.value is original
        assert http_client.post.await_count == 1

    async def test_build_error_propagates(self) -> None:
        http_client = AsyncMock()
        http_client.post.side_effect = APIError("INVALID_MINT", "Mint not found", 400)
        signer = MagicMock()

        with pytest.raises(APIError) as exc_info:
            await TradeService(http_client, signer).buy(_buy())

        assert exc_info.value.code == "INVALID_MINT"
        signer.sign_transaction.assert_not_called()

    async def test_submit_error_propagates(self) -> None:
        http_client = AsyncMock()
        http_client.post.side_effect = [
            build_response("dHg="),
            APIError("UNAUTHORIZED", "Invalid API key", 401),
        ]
        signer = MagicMock()
        signer.sign_transaction.return_value = "c2lnbmVk"

        with pytest.raises(APIError) as exc_info:
            await TradeService(http_client, signer).buy(_buy())

        assert exc_info.value.status == 401


class TestSellAndSwap:
    async def test_sell_uses_sell_endpoint(self) -> None:
        svc, http_client, _ = _service(
            build_response("dHg=", input_mint=TEST_TOKEN_MINT, output_mint=SOL_MINT),
            submit_response(input_mint=TEST_TOKEN_MINT, output_mint=SOL_MINT),
        )

        result = await svc.sell(
            SellOptions(mint=TEST_TOKEN_MINT, token_amount=1500, slippage=0.05, priority="economy")
        )

        path, payload = http_client.post.await_args_list[0].args
        assert path == "/tx/sell"
        assert payload == {"mint": TEST_TOKEN_MINT, "tokenAmount": 1500, "slippage": 0.05, "priority": "economy"}
        assert http_client.post.await_args_list[1].args[0] == "/tx/submit"
        assert result.output_mint == SOL_MINT

    async def test_swap_uses_swap_endpoint(self) -> None:
        svc, http_client, _ = _service(build_response("dHg="), submit_response())

        await svc.swap(
            SwapOptions(
                input_mint="SOL",
                output_mint=TEST_TOKEN_MINT,
                amount=0.002,
                swap_mode="exactOut",
                slippage=0.05,
                priority="fastest",
            )
        )

        path, payload = http_client.post.await_args_list[0].args
        assert path == "/tx/swap"
        assert payload == {
            "inputMint": "SOL",
            "outputMint": TEST_TOKEN_MINT,
            "amount": 0.002,
            "swapMode": "exactOut",
            "slippage": 0.05,
            "priority": "fastest",
        }

    async def test_sell_limit_violation(self) -> None:
        svc, http_client, signer = _service(build_response("dHg=", price_impact=0.2), submit_response())

        with pytest.raises(ValidationError, match="exceeds maximum allowed"):
            await svc.sell(
                SellOptions(
                    mint=TEST_TOKEN_MINT, token_amount=10, slippage=0.05, priority="fast", max_price_impact=0.1
                )
            )
        signer.sign_transaction.assert_not_called()
        assert http_client.post.await_count == 1
