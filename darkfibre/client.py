from __future__ import annotations

import time
from typing import Optional

import httpx

from darkfibre.core.onchain.solana_signer import TransactionSigner, keypair_from_base58
from darkfibre.core.services.trade_service import TradeService
from darkfibre.core.structures.structures import (
    BuyOptions,
    ProfileResult,
    RegisterRequest,
    RegisterResult,
    SellOptions,
    SwapOptions,
    TransactionResult,
)
from darkfibre.integrations.darkfibre.darkfibre_constants import (
    DEFAULT_BASE_URL,
    HTTP_TIMEOUT_SECONDS,
    PROFILE_ENDPOINT,
    REGISTER_ENDPOINT,
    REGISTER_MESSAGE_PREFIX,
)
from darkfibre.integrations.darkfibre.darkfibre_helpers import _unwrap_data
from darkfibre.integrations.darkfibre.darkfibre_http import DarkfibreHttpClient
from darkfibre.logging.logger import get_logger

log = get_logger(__name__)


class DarkfibreClient:
    """
    Client for the Darkfibre Solana DEX API.

    Trades are built by the backend, signed locally with `private_key` and then
    submitted; the key never leaves the process.

    Failures surface as `ValidationError`, `SigningError` or `APIError`. A 2xx
    response whose body does not match the expected `{data: {...}}` shape raises
    `ValueError` (or its `pydantic.ValidationError` subclass) instead. After a
    trade's submit call this means the transaction may already be on-chain.

    Example:
        async with DarkfibreClient(api_key="api_...", private_key="<base58>") as client:
            result = await client.buy(BuyOptions(mint="...", sol_amount=0.1, slippage=0.01, priority="fast"))
            print(result.signature)
    """

    def __init__(
            self,
            api_key: str,
            private_key: str,
            base_url: str = DEFAULT_BASE_URL,
            timeout: float = HTTP_TIMEOUT_SECONDS,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.http_client = DarkfibreHttpClient(base_url, api_key=api_key, timeout=timeout, transport=transport)
        self.signer = TransactionSigner(private_key)
        self.trade_service = TradeService(self.http_client, self.signer)

    async def close(self) -> None:
        await self.http_client.close()

    async def __aenter__(self) -> "DarkfibreClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def wallet_address(self) -> str:
        """Base58 address of the signing wallet."""
        return self.signer.get_wallet_address()

    @staticmethod
    async def register(
            private_key: str,
            base_url: str = DEFAULT_BASE_URL,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> RegisterResult:
        """
        Register a wallet and obtain an API key.

        Proves wallet ownership by signing 'darkfibre:<unix millis>' and posting
        it with the address; no API key is needed for this call.

        Important: the API key is only returned once. Store it securely, the
        client does not keep it anywhere.

        Raises:
            SigningError: if the private key is invalid (no request is sent).
            APIError: if the backend rejects the registration.
            ValueError: if a 2xx response body cannot be parsed.
        """
        keypair = keypair_from_base58(private_key)
        wallet_address = str(keypair.pubkey())

        message = f"{REGISTER_MESSAGE_PREFIX}{int(time.time() * 1000)}"
        signature = str(keypair.sign_message(message.encode("utf-8")))
        request = RegisterRequest(wallet_address=wallet_address, message=message, signature=signature)

        log.info("[DARKFIBRE][REGISTER] Registering wallet %s", wallet_address)
        async with DarkfibreHttpClient(base_url, transport=transport) as http_client:
            body = await http_client.post(REGISTER_ENDPOINT, request.to_payload())

        result = RegisterResult.model_validate(_unwrap_data(body))
        log.info("[DARKFIBRE][REGISTER] Wallet %s registered.", result.wallet_address)
        return result

    async def buy(self, options: BuyOptions) -> TransactionResult:
        """Buy `options.mint` spending `options.sol_amount` SOL."""
        return await self.trade_service.buy(options)

    async def sell(self, options: SellOptions) -> TransactionResult:
        """Sell `options.token_amount` of `options.mint` for SOL."""
        return await self.trade_service.sell(options)

    async def swap(self, options: SwapOptions) -> TransactionResult:
        """Swap `options.input_mint` into `options.output_mint`."""
        return await self.trade_service.swap(options)

    async def get_profile(self) -> ProfileResult:
        """Wallet, 30-day volume and fee tier of the authenticated account (computed server-side)."""
        body = await self.http_client.get(PROFILE_ENDPOINT)
        return ProfileResult.model_validate(_unwrap_data(body))
