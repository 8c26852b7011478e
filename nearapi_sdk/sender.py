"""
Submission of signed transactions with a selectable finality level.
"""
import logging
import threading
from typing import Union

from .exceptions import TransactionAlreadySubmittedError, UnexpectedResponseError
from .models import TxExecutionResponse, TxExecutionStatus
from .providers.provider import Provider
from .transactions.transaction import SignedTransaction

logger = logging.getLogger(__name__)

DEFAULT_WAIT_UNTIL = TxExecutionStatus.EXECUTED_OPTIMISTIC


class TransactionSender:
    """
    Sends one signed transaction and tracks its progress.

    The transaction is submitted at most once: a second ``submit`` (or any of
    the ``transact*`` shortcuts) raises ``TransactionAlreadySubmittedError``.
    Status polling through ``get_status`` is unrestricted.

    Example:
        sender = TransactionSender(signed_tx, provider)
        outcome = sender.transact()
        outcome.raise_for_failure()
    """

    def __init__(self, signed_transaction: SignedTransaction, provider: Provider):
        self.signed_transaction = signed_transaction
        self.provider = provider
        self._submitted = False
        self._lock = threading.Lock()

    @property
    def submitted(self) -> bool:
        return self._submitted

    def get_hash(self) -> bytes:
        return self.signed_transaction.get_hash()

    def get_hash_base58(self) -> str:
        return self.signed_transaction.get_hash_base58()

    def submit(self, wait_until: TxExecutionStatus = DEFAULT_WAIT_UNTIL) -> TxExecutionResponse:
        """
        Submit the transaction and wait until it reaches ``wait_until``.

        With ``NONE`` the call returns once the node accepted the transaction
        into its pool; the response then carries only the hash. Deeper levels
        return the execution outcome observed at that depth.

        Args:
            wait_until: Finality level to wait for

        Returns:
            TxExecutionResponse

        Raises:
            TransactionAlreadySubmittedError: If this transaction was already submitted
            SubmissionRejected: If the ledger refused the transaction
            TransportError: If the outcome is unknown; poll ``get_status`` before resubmitting
            UnexpectedResponseError: If the node reports a shallower level than requested
        """
        wait_until = TxExecutionStatus.from_rpc(wait_until)
        with self._lock:
            if self._submitted:
                raise TransactionAlreadySubmittedError(
                    f"Transaction {self.get_hash_base58()} was already submitted"
                )
            self._submitted = True

        response = self.provider.submit(self.signed_transaction, wait_until)

        if response.final_execution_status < wait_until:
            raise UnexpectedResponseError(
                f"Requested {wait_until.rpc_name} for {response.transaction_hash} "
                f"but the node reported {response.final_execution_status.rpc_name}"
            )

        logger.info(
            f"Transaction {response.transaction_hash} reached {response.final_execution_status.rpc_name}"
        )
        return response

    def transact(self) -> TxExecutionResponse:
        """Submit and wait for optimistic execution."""
        return self.submit(DEFAULT_WAIT_UNTIL)

    def transact_async(self) -> TxExecutionResponse:
        """Submit and return as soon as the node accepts the transaction."""
        return self.submit(TxExecutionStatus.NONE)

    def transact_advanced(self, wait_until: str) -> TxExecutionResponse:
        """
        Submit with a finality level given by its wire name.

        Args:
            wait_until: e.g. ``"INCLUDED_FINAL"``

        Raises:
            ValueError: If the name is not a known level
        """
        return self.submit(TxExecutionStatus.from_rpc(wait_until))

    def get_status(self, wait_until: Union[TxExecutionStatus, str] = DEFAULT_WAIT_UNTIL) -> TxExecutionResponse:
        """Poll the transaction status; may be called any number of times."""
        return self.provider.get_transaction_status(
            self.get_hash_base58(),
            self.signed_transaction.transaction.signer_id,
            TxExecutionStatus.from_rpc(wait_until),
        )

    def __repr__(self) -> str:
        return f"TransactionSender({self.get_hash_base58()!r}, submitted={self._submitted})"
