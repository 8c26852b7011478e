"""
Fluent builder for ordered action lists.
"""
from typing import List, Optional, Tuple, Union

from ..crypto import PublicKey
from ..utils import encode_args
from .actions import (
    AccessKey,
    Action,
    AddKey,
    CreateAccount,
    DeleteAccount,
    DeleteKey,
    DeployContract,
    FunctionCall,
    Stake,
    Transfer,
)

DEFAULT_FUNCTION_CALL_GAS = 30_000_000_000_000


class ActionBuilder:
    """
    Accumulates actions in insertion order.

    Each method appends exactly one action and returns the builder, so calls
    can be chained. Payloads are validated by the action types as they are
    added; combinations are not checked. A builder is meant to be used by one
    caller at a time.

    Example:
        actions = (
            ActionBuilder()
            .create_account()
            .transfer(10 ** 24)
            .add_key(public_key, full_access_key())
            .build()
        )
    """

    def __init__(self):
        self._actions: List[Action] = []

    def add(self, action: Action) -> "ActionBuilder":
        if not isinstance(action, Action):
            raise TypeError(f"Expected an Action, got {type(action).__name__}")
        self._actions.append(action)
        return self

    def create_account(self) -> "ActionBuilder":
        return self.add(CreateAccount())

    def deploy_contract(self, code: bytes) -> "ActionBuilder":
        return self.add(DeployContract(code))

    def function_call(
        self,
        method_name: str,
        args: Optional[Union[bytes, str, dict, list]] = None,
        gas: int = DEFAULT_FUNCTION_CALL_GAS,
        deposit: int = 0
    ) -> "ActionBuilder":
        """
        Append a contract method call.

        Args:
            method_name: Contract method to call
            args: Raw argument bytes, JSON text, or a value encoded as compact JSON
            gas: Gas attached to the call
            deposit: yoctoNEAR attached to the call
        """
        return self.add(FunctionCall(method_name, encode_args(args), gas, deposit))

    def transfer(self, deposit: int) -> "ActionBuilder":
        return self.add(Transfer(deposit))

    def stake(self, stake: int, public_key: Union[PublicKey, str]) -> "ActionBuilder":
        return self.add(Stake(stake, PublicKey.from_string(public_key)))

    def add_key(self, public_key: Union[PublicKey, str], access_key: AccessKey) -> "ActionBuilder":
        return self.add(AddKey(PublicKey.from_string(public_key), access_key))

    def delete_key(self, public_key: Union[PublicKey, str]) -> "ActionBuilder":
        return self.add(DeleteKey(PublicKey.from_string(public_key)))

    def delete_account(self, beneficiary_id: str) -> "ActionBuilder":
        return self.add(DeleteAccount(beneficiary_id))

    def build(self) -> Tuple[Action, ...]:
        """Snapshot of the actions added so far; later additions do not affect it."""
        return tuple(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __repr__(self) -> str:
        return f"ActionBuilder({[type(action).__name__ for action in self._actions]})"
