"""
NEAR API SDK - build, sign and relay NEAR transactions.
"""
from .version import __version__
from .exceptions import (
    AccessKeyNotFound,
    BlockQueryFailed,
    ConstructionError,
    DelegateActionExpired,
    ExecutionFailed,
    InvalidAccountIdError,
    InvalidActionError,
    InvalidKeyError,
    KeyStoreError,
    NearApiError,
    NestedDelegateActionError,
    NonceQueryFailed,
    ResolutionError,
    RpcError,
    RpcTimeout,
    SigningFailed,
    SubmissionError,
    SubmissionRejected,
    SubmissionTimeout,
    TransactionAlreadySubmittedError,
    TransportError,
    UnexpectedResponseError,
)
from .crypto import KeyPair, KeyType, PublicKey, Signature
from .models import BlockInfo, TxExecutionResponse, TxExecutionStatus
from .signer import InMemorySigner, Signer
from .transactions import (
    AccessKey,
    Action,
    ActionBuilder,
    DelegateAction,
    SignedDelegateAction,
    SignedTransaction,
    Transaction,
    assemble_transaction,
    build_relayed_transaction,
    make_delegate,
    sign_delegate,
    sign_transaction,
)
from .nonce import NonceResolver
from .sender import TransactionSender
from .providers import FastNearClient, JsonRpcProvider, Provider
from .accounts import Account, full_access_key, function_call_access_key
from .config import NetworkConfig
from .connection import Connection, ConnectionConfig

__all__ = [
    "__version__",
    # Core pipeline
    "Action",
    "ActionBuilder",
    "AccessKey",
    "Transaction",
    "SignedTransaction",
    "DelegateAction",
    "SignedDelegateAction",
    "assemble_transaction",
    "sign_transaction",
    "make_delegate",
    "sign_delegate",
    "build_relayed_transaction",
    "NonceResolver",
    "TransactionSender",
    "TxExecutionStatus",
    "TxExecutionResponse",
    "BlockInfo",
    # Keys and signing
    "KeyType",
    "KeyPair",
    "PublicKey",
    "Signature",
    "Signer",
    "InMemorySigner",
    # Services and accounts
    "Provider",
    "JsonRpcProvider",
    "FastNearClient",
    "Account",
    "full_access_key",
    "function_call_access_key",
    "NetworkConfig",
    "Connection",
    "ConnectionConfig",
    # Exceptions
    "NearApiError",
    "ConstructionError",
    "InvalidActionError",
    "InvalidAccountIdError",
    "InvalidKeyError",
    "NestedDelegateActionError",
    "ResolutionError",
    "NonceQueryFailed",
    "AccessKeyNotFound",
    "BlockQueryFailed",
    "SigningFailed",
    "SubmissionError",
    "SubmissionRejected",
    "TransportError",
    "SubmissionTimeout",
    "TransactionAlreadySubmittedError",
    "UnexpectedResponseError",
    "RpcError",
    "RpcTimeout",
    "ExecutionFailed",
    "DelegateActionExpired",
    "KeyStoreError",
]
