"""
Abstract query/submit service.

Concrete providers implement the raw RPC primitives; the typed operations the
rest of the SDK relies on (nonce lookup, recent block, submission, status
polling) are built on top of them here so that every provider maps results
and errors the same way.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..crypto import PublicKey
from ..exceptions import (
    AccessKeyNotFound,
    BlockQueryFailed,
    NearApiError,
    RpcError,
    UnexpectedResponseError,
)
from ..models import AccessKeyView, BlockInfo, TxExecutionResponse, TxExecutionStatus
from ..transactions.transaction import SignedTransaction
from ..utils import b58encode

logger = logging.getLogger(__name__)

# Query error causes meaning the key or its account does not exist
MISSING_KEY_CAUSES = ("UNKNOWN_ACCESS_KEY", "UNKNOWN_ACCOUNT")


class Provider(ABC):
    """
    Abstract base class for NEAR query/submit services.

    Subclasses implement ``query``, ``block``, ``send_tx``, ``tx_status`` and
    ``experimental_protocol_config``; each returns the JSON ``result`` of the
    call or raises ``RpcError`` / ``TransportError`` (submissions raise
    ``SubmissionRejected`` when the ledger refuses the transaction).
    """

    @abstractmethod
    def query(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run a ``query`` request (view_account, view_access_key, call_function, ...).

        Args:
            params: Query parameters including ``request_type``

        Returns:
            Query result
        """
        pass

    @abstractmethod
    def block(self, finality: Optional[str] = "final", block_id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        """
        Fetch a block by finality or by height/hash.

        Returns:
            Block with ``header`` and ``chunks``
        """
        pass

    @abstractmethod
    def send_tx(self, signed_tx_base64: str, wait_until: TxExecutionStatus) -> Dict[str, Any]:
        """
        Send a signed transaction and wait until it reaches ``wait_until``.

        Implementations must make exactly one network call.

        Raises:
            SubmissionRejected: If the ledger refused the transaction
            TransportError: If the outcome is unknown
        """
        pass

    @abstractmethod
    def tx_status(self, tx_hash: str, sender_id: str, wait_until: TxExecutionStatus) -> Dict[str, Any]:
        """Fetch the status of a transaction by base58 hash."""
        pass

    @abstractmethod
    def experimental_protocol_config(self, finality: str = "final") -> Dict[str, Any]:
        """Fetch the current protocol configuration."""
        pass

    def view_access_key(self, account_id: str, public_key: Union[PublicKey, str]) -> AccessKeyView:
        """
        Fetch an access key at final finality.

        Raises:
            AccessKeyNotFound: If the key or the account does not exist
            RpcError: For other query errors
        """
        public_key = str(PublicKey.from_string(public_key))
        try:
            result = self.query({
                "request_type": "view_access_key",
                "finality": "final",
                "account_id": account_id,
                "public_key": public_key,
            })
        except RpcError as e:
            if e.cause in MISSING_KEY_CAUSES:
                raise AccessKeyNotFound(
                    f"Access key {public_key} not found for {account_id}: {e}",
                    account_id=account_id,
                    public_key=public_key,
                ) from e
            raise

        # Older nodes report query failures inside the result
        if "error" in result:
            raise AccessKeyNotFound(
                f"Access key {public_key} not found for {account_id}: {result['error']}",
                account_id=account_id,
                public_key=public_key,
            )

        try:
            return AccessKeyView.model_validate(result)
        except ValidationError as e:
            raise UnexpectedResponseError(f"Malformed view_access_key result: {e}")

    def get_access_key_nonce(self, account_id: str, public_key: Union[PublicKey, str]) -> int:
        """
        Current on-chain nonce of an access key.

        Raises:
            AccessKeyNotFound: If the key or the account does not exist
        """
        return self.view_access_key(account_id, public_key).nonce

    def get_recent_block(self) -> BlockInfo:
        """
        Hash and height of the latest final block.

        Raises:
            BlockQueryFailed: If the block cannot be fetched or is malformed
        """
        try:
            header = self.block(finality="final")["header"]
            info = BlockInfo(hash=header["hash"], height=header["height"])
        except NearApiError as e:
            raise BlockQueryFailed(f"Failed to fetch recent block: {e}") from e
        except (KeyError, TypeError, ValidationError) as e:
            raise BlockQueryFailed(f"Malformed block response: {e}") from e

        logger.debug(f"Recent block {info.hash} at height {info.height}")
        return info

    def get_recent_block_hash(self) -> bytes:
        """32-byte hash of the latest final block."""
        return self.get_recent_block().hash_bytes

    def submit(self, signed_transaction: SignedTransaction, wait_until: TxExecutionStatus) -> TxExecutionResponse:
        """
        Submit a signed transaction.

        Args:
            signed_transaction: SignedTransaction to send
            wait_until: Finality level to wait for

        Returns:
            TxExecutionResponse with ``transaction_hash`` filled in

        Raises:
            SubmissionRejected: If the ledger refused the transaction
            TransportError: If the outcome is unknown
            UnexpectedResponseError: If the result cannot be parsed
        """
        tx_hash = signed_transaction.get_hash_base58()
        logger.debug(f"Submitting transaction {tx_hash} (wait_until={wait_until.rpc_name})")
        result = self.send_tx(signed_transaction.to_base64(), wait_until)
        return self._parse_response(result, tx_hash)

    def get_transaction_status(
        self,
        tx_hash: Union[bytes, str],
        sender_id: str,
        wait_until: TxExecutionStatus = TxExecutionStatus.EXECUTED_OPTIMISTIC
    ) -> TxExecutionResponse:
        """
        Poll the status of a transaction.

        Args:
            tx_hash: Transaction hash as 32 bytes or base58 text
            sender_id: Signer of the transaction
            wait_until: Finality level to wait for

        Returns:
            TxExecutionResponse
        """
        if isinstance(tx_hash, bytes):
            tx_hash = b58encode(tx_hash)
        result = self.tx_status(tx_hash, sender_id, wait_until)
        return self._parse_response(result, tx_hash)

    def _parse_response(self, result: Dict[str, Any], tx_hash: str) -> TxExecutionResponse:
        if not isinstance(result, dict):
            raise UnexpectedResponseError(f"Expected an object for transaction {tx_hash}, got {type(result).__name__}")
        try:
            return TxExecutionResponse.model_validate({**result, "transaction_hash": tx_hash})
        except ValidationError as e:
            raise UnexpectedResponseError(f"Malformed response for transaction {tx_hash}: {e}")
