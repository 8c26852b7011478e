"""
Nonce resolution for access keys.
"""
import logging
from typing import Union

from .crypto import PublicKey
from .exceptions import NearApiError, NonceQueryFailed
from .providers.provider import Provider
from .utils import U64_MAX

logger = logging.getLogger(__name__)


class NonceResolver:
    """
    Computes the next usable nonce of an access key.

    Every call makes exactly one query and returns ``current + 1``. Nothing is
    cached or locked: callers that share an access key across threads or
    processes must serialize nonce resolution and submission themselves,
    otherwise two transactions can be built with the same nonce and one of
    them will be rejected.
    """

    def __init__(self, provider: Provider):
        self.provider = provider

    def resolve_next_nonce(self, account_id: str, public_key: Union[PublicKey, str]) -> int:
        """
        Resolve the nonce to use for the next transaction.

        Args:
            account_id: Account owning the key
            public_key: Access key that will sign

        Returns:
            The on-chain nonce plus one

        Raises:
            AccessKeyNotFound: If the key or the account does not exist
            NonceQueryFailed: If the query fails or the nonce is exhausted
        """
        public_key = PublicKey.from_string(public_key)
        try:
            current = self.provider.get_access_key_nonce(account_id, public_key)
        except NonceQueryFailed:
            raise
        except NearApiError as e:
            raise NonceQueryFailed(
                f"Failed to query nonce of {public_key} on {account_id}: {e}",
                account_id=account_id,
                public_key=str(public_key),
            ) from e

        if current >= U64_MAX:
            raise NonceQueryFailed(
                f"Nonce of {public_key} on {account_id} is exhausted",
                account_id=account_id,
                public_key=str(public_key),
            )

        logger.debug(f"Resolved nonce {current + 1} for {account_id} ({public_key})")
        return current + 1
