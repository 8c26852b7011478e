"""
Exceptions for the NEAR API SDK.

Errors are grouped by the stage that raises them so callers can decide what is
safe to retry:

- ConstructionError: local, no I/O happened. Fix the input.
- ResolutionError: a read (nonce, block) failed. Safe to retry.
- SigningFailed: raised by the signer backend. Retry safety depends on the backend.
- SubmissionError: sending failed. ``SubmissionRejected`` means the ledger refused
  the transaction; ``TransportError`` means the outcome is unknown and the
  transaction status must be checked before resubmitting.
"""
from typing import Any, Dict, Optional


class NearApiError(Exception):
    """Base exception for all SDK errors."""
    pass


# Construction

class ConstructionError(NearApiError):
    """Raised when a local value cannot be built from the given input."""
    pass


class InvalidActionError(ConstructionError):
    """Raised when an action payload is malformed."""
    pass


class InvalidAccountIdError(ConstructionError):
    """Raised when an account id does not follow the NEAR account id rules."""
    pass


class InvalidKeyError(ConstructionError):
    """Raised when a key or signature cannot be parsed."""
    pass


class NestedDelegateActionError(ConstructionError):
    """Raised when a delegate action would contain another delegate action."""
    pass


# Resolution

class ResolutionError(NearApiError):
    """Raised when a read needed to assemble a transaction fails."""
    pass


class NonceQueryFailed(ResolutionError):
    """Raised when the current nonce of an access key cannot be obtained."""

    def __init__(self, message: str, account_id: Optional[str] = None, public_key: Optional[str] = None):
        self.account_id = account_id
        self.public_key = public_key
        super().__init__(message)


class AccessKeyNotFound(NonceQueryFailed):
    """Raised when the access key (or its account) does not exist on chain."""
    pass


class BlockQueryFailed(ResolutionError):
    """Raised when the recent block hash or height cannot be obtained."""
    pass


# Signing

class SigningFailed(NearApiError):
    """Raised when the key material is unavailable or the signing operation is rejected."""
    pass


# Submission

class SubmissionError(NearApiError):
    """Base class for errors raised while sending a signed transaction."""
    pass


class SubmissionRejected(SubmissionError):
    """
    Raised when the ledger explicitly refused the transaction.

    The transaction was not accepted, so it is safe to fix the cause and
    resubmit a new transaction with a fresh nonce.
    """

    def __init__(
        self,
        reason: str,
        cause: Optional[str] = None,
        info: Optional[Dict[str, Any]] = None
    ):
        self.reason = reason
        self.cause = cause
        self.info = info or {}
        message = f"Transaction rejected: {reason}"
        if cause and cause != reason:
            message += f" ({cause})"
        super().__init__(message)


class TransportError(SubmissionError):
    """
    Raised when the service could not be reached or gave no usable answer.

    The transaction may or may not have been accepted. Check its status
    before resubmitting.
    """

    def __init__(self, message: str, http_status: Optional[int] = None):
        self.http_status = http_status
        super().__init__(message)


class SubmissionTimeout(TransportError):
    """Raised when the service timed out before reporting the requested status."""
    pass


class TransactionAlreadySubmittedError(SubmissionError):
    """Raised when a signed transaction is submitted a second time."""
    pass


class UnexpectedResponseError(SubmissionError):
    """Raised when the service answers with a payload that violates the protocol."""
    pass


# Reads and outcomes

class RpcError(NearApiError):
    """Raised when a JSON-RPC read call returns an error object."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        name: Optional[str] = None,
        cause: Optional[str] = None,
        code: Optional[int] = None,
        data: Any = None
    ):
        self.method = method
        self.name = name
        self.cause = cause
        self.code = code
        self.data = data
        super().__init__(message)


class RpcTimeout(RpcError):
    """Raised when a read call timed out. Nothing was submitted, so it is safe to retry."""
    pass


class ExecutionFailed(NearApiError):
    """Raised by ``TxExecutionResponse.raise_for_failure`` when execution failed on chain."""

    def __init__(self, message: str, failure: Optional[Dict[str, Any]] = None):
        self.failure = failure or {}
        super().__init__(message)


class DelegateActionExpired(ExecutionFailed):
    """Raised when a relayed delegate action was executed after its max block height."""
    pass


class KeyStoreError(NearApiError):
    """Raised when a key store cannot read or write key material."""
    pass
