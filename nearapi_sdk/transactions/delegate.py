"""
Delegate actions (meta-transactions).

An inner sender signs a ``DelegateAction`` describing what it wants done; a
relayer wraps the signed delegate as the single action of its own
transaction, signs that with its own key and pays the gas.
"""
import logging
from typing import Sequence, Union

from ..crypto import PublicKey
from ..exceptions import ConstructionError
from ..signer import Signer
from ..utils import b58encode
from .actions import Action, DelegateAction, SignedDelegateAction
from .transaction import Transaction, assemble_transaction

logger = logging.getLogger(__name__)


def make_delegate(
    sender_id: str,
    receiver_id: str,
    actions: Sequence[Action],
    nonce: int,
    max_block_height: int,
    sender_public_key: Union[PublicKey, str]
) -> DelegateAction:
    """
    Build a delegate action.

    Args:
        sender_id: Account on whose behalf the actions run
        receiver_id: Account the actions apply to
        actions: Ordered actions; must not contain a ``Delegate`` action
        nonce: Next nonce of ``sender_public_key`` on ``sender_id``
        max_block_height: Last block height at which the delegate may execute
        sender_public_key: Access key of ``sender_id`` that will sign

    Returns:
        DelegateAction

    Raises:
        NestedDelegateActionError: If ``actions`` contains a delegate action
        ConstructionError: If any other field is malformed
    """
    return DelegateAction(
        sender_id=sender_id,
        receiver_id=receiver_id,
        actions=tuple(actions),
        nonce=nonce,
        max_block_height=max_block_height,
        public_key=PublicKey.from_string(sender_public_key),
    )


def sign_delegate(delegate: DelegateAction, inner_signer: Signer) -> SignedDelegateAction:
    """
    Sign a delegate action with the sender's key.

    The signature covers the NEP-461 prefixed hash, so it is never valid as a
    plain transaction signature.

    Raises:
        ConstructionError: If the signer's key is not the delegate's key
        SigningFailed: If the signer cannot sign
    """
    signer_key = inner_signer.public_key()
    if signer_key != delegate.public_key:
        raise ConstructionError(
            f"Signer key {signer_key} does not match delegate key {delegate.public_key}"
        )

    delegate_hash = delegate.get_nep461_hash()
    logger.debug(
        f"Signing delegate action {b58encode(delegate_hash)} for {delegate.sender_id} "
        f"(nonce {delegate.nonce}, max height {delegate.max_block_height})"
    )
    return SignedDelegateAction(delegate_action=delegate, signature=inner_signer.sign(delegate_hash))


def build_relayed_transaction(
    relayer_id: str,
    relayer_public_key: Union[PublicKey, str],
    signed_delegate: SignedDelegateAction,
    nonce: int,
    block_hash: Union[bytes, str]
) -> Transaction:
    """
    Wrap a signed delegate into the relayer's transaction.

    The delegate becomes the only action and the transaction is addressed to
    the delegate's sender.

    Args:
        relayer_id: Account paying for the relay
        relayer_public_key: Relayer access key that will sign
        signed_delegate: Delegate signed by its sender
        nonce: Next nonce of the relayer key
        block_hash: Recent block hash

    Returns:
        Unsigned Transaction for the relayer to sign
    """
    return assemble_transaction(
        signer_id=relayer_id,
        signer_public_key=relayer_public_key,
        receiver_id=signed_delegate.delegate_action.sender_id,
        nonce=nonce,
        block_hash=block_hash,
        actions=[signed_delegate.to_action()],
    )
