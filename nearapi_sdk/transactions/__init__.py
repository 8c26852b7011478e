"""
Transaction construction: actions, assembly, signing and delegate actions.
"""
from .actions import (
    AccessKey,
    Action,
    AddKey,
    CreateAccount,
    Delegate,
    DelegateAction,
    DeleteAccount,
    DeleteKey,
    DeployContract,
    FullAccessPermission,
    FunctionCall,
    FunctionCallPermission,
    SignedDelegateAction,
    Stake,
    Transfer,
)
from .action_builder import ActionBuilder, DEFAULT_FUNCTION_CALL_GAS
from .transaction import SignedTransaction, Transaction, assemble_transaction, sign_transaction
from .delegate import build_relayed_transaction, make_delegate, sign_delegate

__all__ = [
    "AccessKey",
    "Action",
    "ActionBuilder",
    "AddKey",
    "CreateAccount",
    "DEFAULT_FUNCTION_CALL_GAS",
    "Delegate",
    "DelegateAction",
    "DeleteAccount",
    "DeleteKey",
    "DeployContract",
    "FullAccessPermission",
    "FunctionCall",
    "FunctionCallPermission",
    "SignedDelegateAction",
    "SignedTransaction",
    "Stake",
    "Transaction",
    "Transfer",
    "assemble_transaction",
    "build_relayed_transaction",
    "make_delegate",
    "sign_delegate",
    "sign_transaction",
]
