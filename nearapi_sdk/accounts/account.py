"""
Account-level operations built on the transaction pipeline.

``Account`` resolves the nonce and recent block hash, assembles and signs a
transaction and submits it. The module-level functions are read-only queries
that need no signer.
"""
import logging
from typing import Any, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..crypto import PublicKey
from ..exceptions import RpcError, UnexpectedResponseError
from ..models import (
    AccessKeyListView,
    AccountBalance,
    AccountView,
    CallResult,
    TxExecutionResponse,
    TxExecutionStatus,
    ViewStateResult,
)
from ..nonce import NonceResolver
from ..providers.provider import Provider
from ..sender import DEFAULT_WAIT_UNTIL, TransactionSender
from ..signer import Signer
from ..transactions.action_builder import DEFAULT_FUNCTION_CALL_GAS, ActionBuilder
from ..transactions.actions import Action, SignedDelegateAction, check_no_nested_delegate
from ..transactions.delegate import build_relayed_transaction, make_delegate, sign_delegate
from ..transactions.transaction import SignedTransaction, assemble_transaction, sign_transaction
from ..utils import b64encode, encode_args, validate_account_id
from .access_keys import full_access_key, function_call_access_key

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=BaseModel)

# Blocks a delegate action stays valid after the current height
DEFAULT_DELEGATE_TTL = 100

Actions = Union[ActionBuilder, Sequence[Action]]


def _as_actions(actions: Actions):
    if isinstance(actions, ActionBuilder):
        return actions.build()
    return tuple(actions)


class Account:
    """
    A NEAR account able to sign with one access key.

    Example:
        account = Account("alice.testnet", signer, provider)
        outcome = account.send_money("bob.testnet", 10 ** 24)
        outcome.raise_for_failure()
    """

    def __init__(
        self,
        account_id: str,
        signer: Signer,
        provider: Provider,
        wait_until: TxExecutionStatus = DEFAULT_WAIT_UNTIL
    ):
        """
        Initialize the account

        Args:
            account_id: Account id
            signer: Signer holding an access key of this account
            provider: Query/submit service
            wait_until: Finality level used by the submitting helpers
        """
        self.account_id = validate_account_id(account_id)
        self.signer = signer
        self.provider = provider
        self.wait_until = wait_until
        self.nonce_resolver = NonceResolver(provider)

    def fetch_nonce(self) -> int:
        """
        Current on-chain nonce of this account's signing key.

        Raises:
            AccessKeyNotFound: If the key is not registered on the account
        """
        return self.provider.get_access_key_nonce(self.account_id, self.signer.public_key())

    def create_signed_transaction(self, receiver_id: str, actions: Actions) -> SignedTransaction:
        """
        Resolve nonce and block hash, then assemble and sign a transaction.

        Args:
            receiver_id: Account the actions apply to
            actions: ActionBuilder or sequence of actions

        Returns:
            SignedTransaction ready for submission

        Raises:
            NonceQueryFailed: If the nonce cannot be resolved
            BlockQueryFailed: If the recent block cannot be fetched
            SigningFailed: If the signer fails
        """
        public_key = self.signer.public_key()
        nonce = self.nonce_resolver.resolve_next_nonce(self.account_id, public_key)
        block_hash = self.provider.get_recent_block_hash()
        transaction = assemble_transaction(
            signer_id=self.account_id,
            signer_public_key=public_key,
            receiver_id=receiver_id,
            nonce=nonce,
            block_hash=block_hash,
            actions=_as_actions(actions),
        )
        return sign_transaction(transaction, self.signer)

    def _sign_and_submit(
        self,
        receiver_id: str,
        actions: Actions,
        wait_until: Optional[TxExecutionStatus] = None
    ) -> TxExecutionResponse:
        signed = self.create_signed_transaction(receiver_id, actions)
        return TransactionSender(signed, self.provider).submit(self.wait_until if wait_until is None else wait_until)

    def create_account(
        self,
        new_account_id: str,
        public_key: Union[PublicKey, str],
        amount: int,
        wait_until: Optional[TxExecutionStatus] = None
    ) -> TxExecutionResponse:
        """
        Create a sub-account funded with ``amount`` and a full access key.

        Args:
            new_account_id: New account id, e.g. ``sub.alice.testnet``
            public_key: Full access key of the new account
            amount: Initial balance in yoctoNEAR
            wait_until: Finality level (defaults to the account's)
        """
        validate_account_id(new_account_id)
        actions = (
            ActionBuilder()
            .create_account()
            .transfer(amount)
            .add_key(public_key, full_access_key())
        )
        return self._sign_and_submit(new_account_id, actions, wait_until)

    def add_key(
        self,
        public_key: Union[PublicKey, str],
        allowance: Optional[int] = None,
        contract_id: Optional[str] = None,
        method_names: Optional[Sequence[str]] = None,
        wait_until: Optional[TxExecutionStatus] = None
    ) -> TxExecutionResponse:
        """
        Add a full access key, or a function call key when ``contract_id`` is given.

        Args:
            public_key: Key to add
            allowance: Gas allowance of a function call key (None for unlimited)
            contract_id: Contract a function call key may call
            method_names: Methods a function call key may call ([] for all)
            wait_until: Finality level (defaults to the account's)

        Raises:
            ValueError: If ``contract_id`` is given without ``method_names``
        """
        if contract_id is not None:
            if method_names is None:
                raise ValueError(
                    "method_names is required for function call access keys; pass [] to allow every method"
                )
            access_key = function_call_access_key(allowance, contract_id, method_names)
        else:
            access_key = full_access_key()
        return self._sign_and_submit(self.account_id, ActionBuilder().add_key(public_key, access_key), wait_until)

    def delete_key(self, public_key: Union[PublicKey, str], wait_until: Optional[TxExecutionStatus] = None) -> TxExecutionResponse:
        return self._sign_and_submit(self.account_id, ActionBuilder().delete_key(public_key), wait_until)

    def deploy_contract(self, code: bytes, wait_until: Optional[TxExecutionStatus] = None) -> TxExecutionResponse:
        return self._sign_and_submit(self.account_id, ActionBuilder().deploy_contract(code), wait_until)

    def delete_account(self, beneficiary_id: str, wait_until: Optional[TxExecutionStatus] = None) -> TxExecutionResponse:
        """Delete this account, sending the remaining balance to ``beneficiary_id``."""
        return self._sign_and_submit(self.account_id, ActionBuilder().delete_account(beneficiary_id), wait_until)

    def send_money(self, receiver_id: str, amount: int, wait_until: Optional[TxExecutionStatus] = None) -> TxExecutionResponse:
        """Transfer ``amount`` yoctoNEAR to ``receiver_id``."""
        return self._sign_and_submit(receiver_id, ActionBuilder().transfer(amount), wait_until)

    def stake(self, amount: int, public_key: Union[PublicKey, str], wait_until: Optional[TxExecutionStatus] = None) -> TxExecutionResponse:
        """Stake ``amount`` yoctoNEAR with validator key ``public_key``."""
        return self._sign_and_submit(self.account_id, ActionBuilder().stake(amount, public_key), wait_until)

    def function_call(
        self,
        contract_id: str,
        method_name: str,
        args: Any = None,
        gas: int = DEFAULT_FUNCTION_CALL_GAS,
        deposit: int = 0
    ) -> TransactionSender:
        """
        Prepare a contract call without submitting it.

        Args:
            contract_id: Contract account
            method_name: Method to call
            args: Bytes, JSON text, or a JSON-serializable value
            gas: Gas attached
            deposit: yoctoNEAR attached

        Returns:
            TransactionSender for the signed call; choose the finality level when submitting
        """
        signed = self.create_signed_transaction(
            contract_id,
            ActionBuilder().function_call(method_name, args, gas, deposit),
        )
        return TransactionSender(signed, self.provider)

    def create_signed_delegate(
        self,
        receiver_id: str,
        actions: Actions,
        block_height_ttl: int = DEFAULT_DELEGATE_TTL
    ) -> SignedDelegateAction:
        """
        Sign actions for a relayer to submit on this account's behalf.

        The delegate expires ``block_height_ttl`` blocks after the latest final block.

        Args:
            receiver_id: Account the actions apply to
            actions: ActionBuilder or sequence of actions (no delegate actions)
            block_height_ttl: Validity window in blocks

        Returns:
            SignedDelegateAction to hand to a relayer

        Raises:
            NestedDelegateActionError: If the actions contain a delegate action
        """
        actions = _as_actions(actions)
        if block_height_ttl <= 0:
            raise ValueError(f"block_height_ttl must be positive, got {block_height_ttl}")

        check_no_nested_delegate(actions)
        public_key = self.signer.public_key()

        nonce = self.nonce_resolver.resolve_next_nonce(self.account_id, public_key)
        block = self.provider.get_recent_block()
        delegate = make_delegate(
            sender_id=self.account_id,
            receiver_id=receiver_id,
            actions=actions,
            nonce=nonce,
            max_block_height=block.height + block_height_ttl,
            sender_public_key=public_key,
        )
        return sign_delegate(delegate, self.signer)

    def relay(self, signed_delegate: SignedDelegateAction) -> TransactionSender:
        """
        Wrap a signed delegate in a transaction paid for by this account.

        Returns:
            TransactionSender for the relayed transaction
        """
        public_key = self.signer.public_key()
        nonce = self.nonce_resolver.resolve_next_nonce(self.account_id, public_key)
        block_hash = self.provider.get_recent_block_hash()
        transaction = build_relayed_transaction(
            relayer_id=self.account_id,
            relayer_public_key=public_key,
            signed_delegate=signed_delegate,
            nonce=nonce,
            block_hash=block_hash,
        )
        logger.debug(
            f"Relaying delegate from {signed_delegate.delegate_action.sender_id} as {self.account_id}"
        )
        return TransactionSender(sign_transaction(transaction, self.signer), self.provider)

    def __repr__(self) -> str:
        return f"Account({self.account_id!r})"


def _query(provider: Provider, params: dict, model: Type[M]) -> M:
    result = provider.query(params)
    if isinstance(result, dict) and "error" in result:
        raise RpcError(f"Query {params['request_type']} failed: {result['error']}", method="query", data=result)
    try:
        return model.model_validate(result)
    except ValidationError as e:
        raise UnexpectedResponseError(f"Malformed {params['request_type']} result: {e}")


def view_function(provider: Provider, contract_id: str, method_name: str, args: Any = None) -> CallResult:
    """
    Call a read-only contract method at final finality.

    Args:
        provider: Query service
        contract_id: Contract account
        method_name: View method
        args: Bytes, JSON text, or a JSON-serializable value

    Returns:
        CallResult with the raw return bytes and logs
    """
    return _query(provider, {
        "request_type": "call_function",
        "finality": "final",
        "account_id": contract_id,
        "method_name": method_name,
        "args_base64": b64encode(encode_args(args)),
    }, CallResult)


def view_state(provider: Provider, contract_id: str, prefix: Optional[Union[str, bytes]] = None) -> ViewStateResult:
    """Contract storage entries whose key starts with ``prefix`` (all when None)."""
    if prefix is None:
        prefix = b""
    elif isinstance(prefix, str):
        prefix = prefix.encode("utf-8")
    return _query(provider, {
        "request_type": "view_state",
        "finality": "final",
        "account_id": contract_id,
        "prefix_base64": b64encode(prefix),
        "include_proof": False,
    }, ViewStateResult)


def get_access_key_list(provider: Provider, account_id: str) -> AccessKeyListView:
    return _query(provider, {
        "request_type": "view_access_key_list",
        "finality": "final",
        "account_id": account_id,
    }, AccessKeyListView)


def state(provider: Provider, account_id: str) -> AccountView:
    return _query(provider, {
        "request_type": "view_account",
        "finality": "final",
        "account_id": account_id,
    }, AccountView)


def get_account_balance(provider: Provider, account_id: str) -> AccountBalance:
    """
    Balance breakdown of an account.

    ``state_staked`` is the balance locked for storage (storage usage times
    the protocol's price per byte); ``available`` is what remains once the
    larger of storage and validator stake is set aside.

    Returns:
        AccountBalance in yoctoNEAR
    """
    protocol_config = provider.experimental_protocol_config()
    try:
        cost_per_byte = int(protocol_config["runtime_config"]["storage_amount_per_byte"])
    except (KeyError, TypeError, ValueError) as e:
        raise UnexpectedResponseError(f"Malformed protocol config: {e}")

    account = state(provider, account_id)
    staked = account.locked
    state_staked = cost_per_byte * account.storage_usage
    total = account.amount + staked
    available = total - max(staked, state_staked)

    return AccountBalance(total=total, state_staked=state_staked, staked=staked, available=available)
