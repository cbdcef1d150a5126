from __future__ import annotations

import base64
from typing import List, Optional

import base58
from solders.keypair import Keypair
from solders.message import to_bytes_versioned
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from darkfibre.core.errors import SigningError
from darkfibre.logging.logger import get_logger

log = get_logger(__name__)

KEYPAIR_BYTES_LENGTH: int = 64
PRIVATE_KEY_BYTES_LENGTH: int = 32


def keypair_from_base58(private_key: str) -> Keypair:
    """
    Build an Ed25519 keypair from a base58-encoded secret.

    Accepts both the usual 64-byte keypair export (secret + public key) and a
    bare 32-byte private key seed.

    Raises:
        SigningError: when the secret is not base58, has the wrong length, or is
            rejected by solders (e.g. a 64-byte keypair whose halves do not match).
    """
    try:
        key_bytes = base58.b58decode(private_key)
    except ValueError as exc:
        raise SigningError("Failed to create keypair from private key", exc) from exc

    if len(key_bytes) == KEYPAIR_BYTES_LENGTH:
        builder = Keypair.from_bytes
    elif len(key_bytes) == PRIVATE_KEY_BYTES_LENGTH:
        builder = Keypair.from_seed
    else:
        raise SigningError(
            f"Invalid private key length: {len(key_bytes)} bytes. "
            f"Expected {PRIVATE_KEY_BYTES_LENGTH} or {KEYPAIR_BYTES_LENGTH} bytes."
        )

    try:
        return builder(key_bytes)
    except Exception as exc:
        raise SigningError("Failed to create keypair from private key", exc) from exc


class TransactionSigner:
    """
    Signs Darkfibre-built transactions and messages with a local wallet.

    The keypair is derived lazily from the base58 secret on first use and cached
    for the lifetime of the signer. The secret itself is never logged.
    """

    def __init__(self, private_key: str) -> None:
        self._private_key = private_key
        self._keypair: Optional[Keypair] = None

    def _get_keypair(self) -> Keypair:
        if self._keypair is None:
            self._keypair = keypair_from_base58(self._private_key)
            log.debug("[DARKFIBRE][SIGNER] Keypair loaded. Address=%s", self._keypair.pubkey())
        return self._keypair

    def get_wallet_address(self) -> str:
        """Public base58 address derived from the loaded secret key."""
        return str(self._get_keypair().pubkey())

    def sign_message(self, message: str) -> str:
        """Sign the UTF-8 bytes of `message` and return the base58 signature."""
        keypair = self._get_keypair()
        signature = keypair.sign_message(message.encode("utf-8"))
        return str(signature)

    def sign_transaction(self, unsigned_transaction_base64: str) -> str:
        """
        Sign a base64 wire-format VersionedTransaction and return it re-encoded.

        Only our signature slot is filled; signatures already present for other
        required signers are preserved. A transaction that still lacks a required
        signature after ours is placed is rejected.
        """
        keypair = self._get_keypair()
        try:
            raw_bytes = base64.b64decode(unsigned_transaction_base64, validate=True)
            unsigned = VersionedTransaction.from_bytes(raw_bytes)
            signed = self._sign_versioned(unsigned, keypair)
            signed_base64 = base64.b64encode(bytes(signed)).decode("ascii")
        except Exception as exc:
            raise SigningError("Failed to sign transaction", exc) from exc

        log.debug("[DARKFIBRE][SIGNER] Signed transaction (bytes=%d)", len(raw_bytes))
        return signed_base64

    @staticmethod
    def _sign_versioned(transaction: VersionedTransaction, keypair: Keypair) -> VersionedTransaction:
        message = transaction.message
        required = message.header.num_required_signatures
        signer_keys = list(message.account_keys)[:required]

        our_pubkey = keypair.pubkey()
        if our_pubkey not in signer_keys:
            raise ValueError(f"Wallet {our_pubkey} is not a required signer of this transaction.")

        signatures: List[Signature] = list(transaction.signatures)
        if len(signatures) < required:
            signatures.extend(Signature.default() for _ in range(required - len(signatures)))

        signatures[signer_keys.index(our_pubkey)] = keypair.sign_message(to_bytes_versioned(message))

        # Every required signer must have signed before the transaction can be submitted
        missing = [str(key) for key, signature in zip(signer_keys, signatures) if signature == Signature.default()]
        if missing:
            raise ValueError(f"Transaction is missing signatures for required signers: {', '.join(missing)}")

        return VersionedTransaction.populate(message, signatures)
