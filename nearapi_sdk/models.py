"""
Data models for the NEAR API SDK.
"""
import json
from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .exceptions import DelegateActionExpired, ExecutionFailed
from .utils import b58decode, b64decode


class TxExecutionStatus(IntEnum):
    """
    Finality depth of a submitted transaction, totally ordered.

    NONE: not yet in a block (the pool accepted it)
    INCLUDED: included in a block, which may not be final
    EXECUTED_OPTIMISTIC: included and all non-refund receipts executed, optimistically
    INCLUDED_FINAL: included in a final block
    EXECUTED: included in a final block and all non-refund receipts executed
    FINAL: final block and all receipts (refunds included) finalized
    """
    NONE = 0
    INCLUDED = 1
    EXECUTED_OPTIMISTIC = 2
    INCLUDED_FINAL = 3
    EXECUTED = 4
    FINAL = 5

    @property
    def rpc_name(self) -> str:
        """Name used for this level on the wire."""
        return self.name

    @classmethod
    def from_rpc(cls, value: Union[str, int, "TxExecutionStatus"]) -> "TxExecutionStatus":
        """
        Parse a level from its wire name (case-insensitive) or numeric value.

        Raises:
            ValueError: If the value names no level
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            try:
                return cls[value.upper()]
            except KeyError:
                pass
        available = ", ".join(level.name for level in cls)
        raise ValueError(f"Unknown execution status {value!r}. Available: {available}")


def _to_int(value: Any) -> Any:
    # Balances come over the wire as decimal strings
    if isinstance(value, str):
        return int(value)
    return value


class TxExecutionResponse(BaseModel):
    """
    Result of submitting a transaction or polling its status.

    For ``NONE`` only ``final_execution_status`` (and the locally computed
    ``transaction_hash``) is present; deeper levels carry the outcome fields.
    """
    final_execution_status: TxExecutionStatus = TxExecutionStatus.NONE
    status: Optional[Any] = None
    transaction: Optional[Dict[str, Any]] = None
    transaction_outcome: Optional[Dict[str, Any]] = None
    receipts_outcome: List[Dict[str, Any]] = Field(default_factory=list)
    receipts: Optional[List[Dict[str, Any]]] = None
    transaction_hash: Optional[str] = None

    @field_validator("final_execution_status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> TxExecutionStatus:
        return TxExecutionStatus.from_rpc(value)

    @property
    def has_outcome(self) -> bool:
        """Whether the response carries an execution outcome."""
        return self.status is not None

    @property
    def failure(self) -> Optional[Dict[str, Any]]:
        """The ``Failure`` payload of the final status, or None."""
        if isinstance(self.status, dict):
            return self.status.get("Failure")
        return None

    @property
    def is_success(self) -> bool:
        """True when an outcome is present and it is not a failure."""
        return self.has_outcome and self.failure is None

    @property
    def success_value(self) -> Optional[bytes]:
        """Decoded return value of the last receipt, if the outcome succeeded with one."""
        if isinstance(self.status, dict) and "SuccessValue" in self.status:
            return b64decode(self.status["SuccessValue"] or "")
        return None

    @property
    def signer_id(self) -> Optional[str]:
        return (self.transaction or {}).get("signer_id")

    @property
    def receipt_executor_ids(self) -> List[str]:
        """Executor account of every receipt outcome, in order."""
        return [
            receipt.get("outcome", {}).get("executor_id")
            for receipt in self.receipts_outcome
        ]

    @property
    def tokens_burnt(self) -> int:
        """Total tokens burnt by the transaction and all its receipts."""
        outcomes = list(self.receipts_outcome)
        if self.transaction_outcome:
            outcomes.append(self.transaction_outcome)
        return sum(int(outcome.get("outcome", {}).get("tokens_burnt", 0)) for outcome in outcomes)

    def raise_for_failure(self) -> None:
        """
        Raise if the execution outcome is a failure.

        Raises:
            DelegateActionExpired: If a relayed delegate action ran past its max block height
            ExecutionFailed: For any other failure
        """
        failure = self.failure
        if failure is None:
            return
        detail = json.dumps(failure, sort_keys=True)
        if "DelegateActionExpired" in detail:
            raise DelegateActionExpired(f"Delegate action expired: {detail}", failure)
        raise ExecutionFailed(f"Transaction execution failed: {detail}", failure)


class BlockInfo(BaseModel):
    """Hash and height of a block."""
    hash: str
    height: int

    @property
    def hash_bytes(self) -> bytes:
        return b58decode(self.hash)


class AccessKeyView(BaseModel):
    """Access key as returned by ``view_access_key``."""
    nonce: int
    permission: Union[str, Dict[str, Any]]
    block_height: Optional[int] = None
    block_hash: Optional[str] = None

    @property
    def is_full_access(self) -> bool:
        return self.permission == "FullAccess"


class AccessKeyInfoView(BaseModel):
    public_key: str
    access_key: AccessKeyView


class FastNearAccessKeyView(BaseModel):
    """Access key as returned by the FastNEAR HTTP API (flat, one key)."""
    nonce: int
    public_key: str
    type: str
    allowance: Optional[int] = None
    receiver_id: Optional[str] = None
    method_names: List[str] = Field(default_factory=list)

    @field_validator("allowance", mode="before")
    @classmethod
    def parse_allowance(cls, value: Any) -> Any:
        return _to_int(value)

    @property
    def is_full_access(self) -> bool:
        return self.type == "FullAccess"


class AccessKeyListView(BaseModel):
    keys: List[AccessKeyInfoView] = Field(default_factory=list)
    block_height: Optional[int] = None
    block_hash: Optional[str] = None


class AccountView(BaseModel):
    """Account state as returned by ``view_account``."""
    amount: int
    locked: int
    code_hash: str
    storage_usage: int
    storage_paid_at: int = 0
    block_height: Optional[int] = None
    block_hash: Optional[str] = None

    @field_validator("amount", "locked", mode="before")
    @classmethod
    def parse_balances(cls, value: Any) -> Any:
        return _to_int(value)


class CallResult(BaseModel):
    """Result of a read-only contract call."""
    result: List[int] = Field(default_factory=list)
    logs: List[str] = Field(default_factory=list)
    block_height: Optional[int] = None
    block_hash: Optional[str] = None

    @property
    def raw(self) -> bytes:
        return bytes(self.result)

    def decode_json(self) -> Any:
        """Parse the returned bytes as JSON."""
        return json.loads(self.raw.decode("utf-8"))


class StateItem(BaseModel):
    key: str
    value: str

    @property
    def key_bytes(self) -> bytes:
        return b64decode(self.key)

    @property
    def value_bytes(self) -> bytes:
        return b64decode(self.value)


class ViewStateResult(BaseModel):
    """Contract storage as returned by ``view_state``."""
    values: List[StateItem] = Field(default_factory=list)
    proof: Optional[List[str]] = None
    block_height: Optional[int] = None
    block_hash: Optional[str] = None

    def as_dict(self) -> Dict[bytes, bytes]:
        return {item.key_bytes: item.value_bytes for item in self.values}


class AccountBalance(BaseModel):
    """Account balance breakdown in yoctoNEAR."""
    total: int
    state_staked: int
    staked: int
    available: int
