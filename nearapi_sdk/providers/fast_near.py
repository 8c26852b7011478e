"""
Client for the FastNEAR HTTP API.

FastNEAR serves common reads as plain GET requests
(``/account/<id>``, ``/account/<id>/key/<public key>``,
``/account/<id>/contract/methods``, ``/account/<id>/view/<method>?<args>``),
which is cheaper than a JSON-RPC ``query`` for account dashboards and web4
pages. It has no submission endpoints.
"""
import json
import logging
import urllib.parse
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .._rate_limited_log import rate_limited_log
from ..config import get_rpc_timeout
from ..crypto import PublicKey
from ..exceptions import RpcError, RpcTimeout, TransportError, UnexpectedResponseError
from ..models import AccountView, FastNearAccessKeyView
from ..utils import validate_account_id
from .json_rpc import _validate_rpc_url

logger = logging.getLogger(__name__)


def _view_query_params(args: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Flatten view arguments into query parameters; strings go as-is, other values as compact JSON."""
    if args is None:
        return {}
    if not isinstance(args, dict):
        raise ValueError(f"FastNEAR view arguments must be a JSON object, got {type(args).__name__}")
    return {
        key: value if isinstance(value, str) else json.dumps(value, separators=(",", ":"))
        for key, value in args.items()
    }


class FastNearClient:
    """
    Read-only client for a FastNEAR endpoint.

    Example:
        >>> with FastNearClient(NetworkConfig.get_fast_near_url("mainnet")) as client:
        ...     client.account_info("vlad.near").amount
    """

    def __init__(
        self,
        base_url: str,
        retry_count: int = 3,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        """
        Initialize the client

        Args:
            base_url: FastNEAR endpoint (e.g., "https://rpc.web4.near.page")
            retry_count: Number of retries on connection errors and 502/503/504
            timeout: HTTP timeout in seconds (defaults to NEAR_RPC_TIMEOUT or 30)
            headers: Extra HTTP headers, e.g. an API key

        Raises:
            ValueError: If the URL is not https (unless local or NEAR_INSECURE_RPC=1)
        """
        _validate_rpc_url(base_url)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else get_rpc_timeout()
        self.headers = {"Content-Type": "application/json", **(headers or {})}

        self.session = requests.Session()
        retries = Retry(
            total=retry_count,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        GET a path and return the decoded JSON body.

        Raises:
            RpcTimeout: If the request timed out
            TransportError: On connection errors
            RpcError: If the endpoint answered with a non-200 status
            UnexpectedResponseError: If the body is not JSON
        """
        url = f"{self.base_url}{path}"
        logger.debug(f"FastNEAR GET {url}")

        try:
            response = self.session.get(url, params=params, headers=self.headers, timeout=self.timeout)
        except requests.Timeout as e:
            logger.error(f"FastNEAR {path} timed out: {e}")
            raise RpcTimeout(f"FastNEAR {path} timed out after {self.timeout}s: {e}", method=path)
        except requests.RequestException as e:
            rate_limited_log(f"FastNEAR endpoint {self.base_url} unreachable: {e}", logger_instance=logger)
            raise TransportError(f"FastNEAR {path} failed: {e}")

        if response.status_code != 200:
            raise RpcError(
                f"FastNEAR {path} failed with HTTP {response.status_code}: {response.text[:200]}",
                method=path,
                code=response.status_code,
                data=response.text,
            )

        try:
            return response.json()
        except ValueError:
            raise UnexpectedResponseError(f"FastNEAR {path} returned a non-JSON body")

    def account_info(self, account_id: str) -> AccountView:
        """Balance, code hash and storage usage of an account."""
        account_id = validate_account_id(account_id)
        result = self._get(f"/account/{account_id}")
        try:
            return AccountView.model_validate(result)
        except ValidationError as e:
            raise UnexpectedResponseError(f"Malformed FastNEAR account result: {e}")

    def contract_methods(self, account_id: str) -> List[str]:
        """Names of the methods exported by the contract deployed on an account."""
        account_id = validate_account_id(account_id)
        result = self._get(f"/account/{account_id}/contract/methods")
        if not isinstance(result, list) or not all(isinstance(name, str) for name in result):
            raise UnexpectedResponseError(f"Malformed FastNEAR contract methods result: {result!r}")
        return result

    def access_key(self, account_id: str, public_key: Union[PublicKey, str]) -> FastNearAccessKeyView:
        """
        Fetch one access key of an account.

        Args:
            account_id: Account holding the key
            public_key: Key as a PublicKey or ``ed25519:<base58>`` text

        Returns:
            FastNearAccessKeyView
        """
        account_id = validate_account_id(account_id)
        public_key = str(PublicKey.from_string(public_key))
        result = self._get(f"/account/{account_id}/key/{urllib.parse.quote(public_key, safe=':')}")
        try:
            return FastNearAccessKeyView.model_validate(result)
        except ValidationError as e:
            raise UnexpectedResponseError(f"Malformed FastNEAR access key result: {e}")

    def view_function(self, contract_id: str, method_name: str, args: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call a read-only contract method.

        Args:
            contract_id: Contract account
            method_name: View method
            args: JSON object of arguments, sent as query parameters

        Returns:
            The method's decoded JSON return value
        """
        contract_id = validate_account_id(contract_id)
        if not method_name:
            raise ValueError("method_name must not be empty")
        path = f"/account/{contract_id}/view/{urllib.parse.quote(method_name, safe='')}"
        return self._get(path, params=_view_query_params(args))

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "FastNearClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"FastNearClient({self.base_url!r})"
