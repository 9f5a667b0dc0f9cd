"""Signs serialized legacy transactions with a configured keypair."""

from __future__ import annotations

from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from solwatch.solwatch_logging import get_logger

logger = get_logger(__name__)


class SigningEngine:
    def __init__(self, secret_key: bytes) -> None:
        try:
            self._keypair = Keypair.from_bytes(secret_key)
        except Exception as e:
            raise ValueError(f"Invalid signer secret key: {e}") from e

    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    def sign_transaction(self, raw: bytes) -> bytes:
        """
        Partially sign a wire-format transaction with this keypair and return the
        re-serialized bytes. Raises ValueError when the bytes do not decode or the
        keypair is not a required signer.
        """
        try:
            tx = Transaction.from_bytes(raw)
        except Exception as e:
            raise ValueError(f"Invalid transaction bytes: {e}") from e
        try:
            tx.partial_sign([self._keypair], tx.message.recent_blockhash)
        except Exception as e:
            raise ValueError(f"Signing failed: {e}") from e
        logger.info("transaction_signed", signer=str(self.pubkey))
        return bytes(tx)
