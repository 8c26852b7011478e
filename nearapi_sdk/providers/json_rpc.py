"""
JSON-RPC provider for NEAR nodes.
"""
import itertools
import logging
import threading
import urllib.parse
from typing import Any, Dict, List, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .._rate_limited_log import rate_limited_log
from ..config import get_rpc_timeout, insecure_rpc_allowed
from ..exceptions import (
    RpcError,
    RpcTimeout,
    SubmissionRejected,
    SubmissionTimeout,
    TransportError,
    UnexpectedResponseError,
)
from ..models import TxExecutionStatus
from .provider import Provider

logger = logging.getLogger(__name__)

LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")

# JSON-RPC error causes meaning the node could not tell whether the transaction landed
TIMEOUT_CAUSES = ("TIMEOUT_ERROR",)
TRANSPORT_CAUSES = ("INTERNAL_ERROR", "REQUEST_ROUTED")


def _validate_rpc_url(rpc_url: str) -> None:
    parsed = urllib.parse.urlparse(rpc_url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(f"rpc_url must be an http(s) URL (got: {rpc_url!r})")
    is_local = parsed.hostname in LOCAL_HOSTS
    if parsed.scheme != "https" and not is_local and not insecure_rpc_allowed():
        raise ValueError(
            f"rpc_url must use https:// for security (got: {parsed.scheme}://). "
            f"Set NEAR_INSECURE_RPC=1 to allow plain http"
        )


def _invalid_tx_reason(value: Any) -> Optional[str]:
    """Name of the first ``InvalidTxError`` variant found in an error payload."""
    if isinstance(value, dict):
        inner = value.get("InvalidTxError")
        if isinstance(inner, str):
            return inner
        if isinstance(inner, dict) and inner:
            return next(iter(inner))
        for nested in value.values():
            reason = _invalid_tx_reason(nested)
            if reason:
                return reason
    return None


def _rejection_reason(error: Dict[str, Any], cause_name: Optional[str]) -> str:
    cause = error.get("cause") or {}
    info = cause.get("info") if isinstance(cause, dict) else None
    reason = _invalid_tx_reason(error.get("data")) or _invalid_tx_reason(info)
    if reason:
        return reason
    # Newer nodes put the variant directly in the cause info
    if isinstance(info, dict) and len(info) == 1:
        return next(iter(info))
    return cause_name or error.get("name") or str(error.get("message", "Unknown error"))


class JsonRpcProvider(Provider):
    """
    Provider talking JSON-RPC 2.0 over HTTP(S) to a NEAR node.

    Reads go through a session that retries on connection errors and 502/503/504.
    Submissions use a separate session without retries so that each submit
    makes exactly one network call; a lost response surfaces as
    ``TransportError`` and the caller decides whether to poll the status.
    """

    def __init__(
        self,
        rpc_url: str,
        retry_count: int = 3,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        """
        Initialize the provider

        Args:
            rpc_url: Node RPC endpoint (e.g., "https://rpc.testnet.near.org")
            retry_count: Number of retries for read requests
            timeout: HTTP timeout in seconds (defaults to NEAR_RPC_TIMEOUT or 30)
            headers: Extra HTTP headers, e.g. an API key for a hosted node

        Raises:
            ValueError: If the URL is not https (unless local or NEAR_INSECURE_RPC=1)
        """
        _validate_rpc_url(rpc_url)
        self.rpc_url = rpc_url
        self.timeout = timeout if timeout is not None else get_rpc_timeout()
        self.headers = dict(headers or {})
        self._ids = itertools.count(1)
        self._ids_lock = threading.Lock()

        # Setup HTTP session with retries for reads
        self.session = requests.Session()
        retries = Retry(
            total=retry_count,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["POST"],
            raise_on_status=False,
            connect=retry_count,
            read=retry_count,
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

        # Submissions must never be replayed by the transport
        self.submit_session = requests.Session()
        self.submit_session.mount("http://", HTTPAdapter(max_retries=0))
        self.submit_session.mount("https://", HTTPAdapter(max_retries=0))

    def _next_id(self) -> int:
        with self._ids_lock:
            return next(self._ids)

    def _post(
        self,
        session: requests.Session,
        method: str,
        params: Union[Dict[str, Any], List[Any]],
        submission: bool = False
    ) -> Dict[str, Any]:
        """
        Send one JSON-RPC request and return the decoded envelope.

        Raises:
            SubmissionTimeout: If a submission timed out
            RpcTimeout: If a read timed out
            TransportError: On connection errors, 5xx without a JSON-RPC body, or non-JSON bodies
            UnexpectedResponseError: If the envelope has neither result nor error
        """
        payload = {"jsonrpc": "2.0", "id": self._next_id(), "method": method, "params": params}
        logger.debug(f"RPC {method} -> {self.rpc_url}")

        try:
            response = session.post(self.rpc_url, json=payload, headers=self.headers, timeout=self.timeout)
        except requests.Timeout as e:
            logger.error(f"RPC {method} timed out: {e}")
            if submission:
                raise SubmissionTimeout(f"RPC {method} timed out after {self.timeout}s: {e}")
            raise RpcTimeout(f"RPC {method} timed out after {self.timeout}s: {e}", method=method)
        except requests.RequestException as e:
            rate_limited_log(f"RPC node {self.rpc_url} unreachable: {e}", logger_instance=logger)
            raise TransportError(f"RPC {method} failed: {e}")

        try:
            body = response.json()
        except ValueError:
            logger.error(f"RPC {method} returned non-JSON body (HTTP {response.status_code})")
            raise TransportError(
                f"RPC {method} returned a non-JSON response (HTTP {response.status_code})",
                http_status=response.status_code,
            )

        if not isinstance(body, dict) or ("result" not in body and "error" not in body):
            if response.status_code >= 400:
                raise TransportError(f"RPC {method} failed with HTTP {response.status_code}", http_status=response.status_code)
            raise UnexpectedResponseError(f"RPC {method} returned a malformed envelope: {body!r}")

        if response.status_code >= 500 and "error" not in body:
            rate_limited_log(f"RPC node {self.rpc_url} returned HTTP {response.status_code}", logger_instance=logger)
            raise TransportError(f"RPC {method} failed with HTTP {response.status_code}", http_status=response.status_code)

        return body

    def _call(self, method: str, params: Union[Dict[str, Any], List[Any]]) -> Any:
        """Read call: JSON-RPC errors become ``RpcError``."""
        body = self._post(self.session, method, params)
        if "error" in body:
            raise self._read_error(method, body["error"])
        return body["result"]

    def _submit_call(self, method: str, params: Union[Dict[str, Any], List[Any]]) -> Any:
        """Submission call: JSON-RPC errors are split into rejected and unknown outcomes."""
        body = self._post(self.submit_session, method, params, submission=True)
        if "error" in body:
            raise self._submission_error(method, body["error"])
        return body["result"]

    @staticmethod
    def _error_parts(error: Any):
        if not isinstance(error, dict):
            return None, None, {"message": str(error)}
        cause = error.get("cause")
        cause_name = cause.get("name") if isinstance(cause, dict) else None
        return error.get("name"), cause_name, error

    def _read_error(self, method: str, error: Any) -> Exception:
        name, cause_name, error = self._error_parts(error)
        if name == "INTERNAL_ERROR":
            return TransportError(f"RPC {method} internal error: {error.get('data') or error.get('message')}")
        message = f"RPC {method} failed: {cause_name or name or 'error'}"
        detail = error.get("data")
        if not detail and isinstance(error.get("cause"), dict):
            detail = error["cause"].get("info")
        if detail:
            message += f" ({detail})"
        return RpcError(
            message,
            method=method,
            name=name,
            cause=cause_name,
            code=error.get("code"),
            data=error.get("data"),
        )

    def _submission_error(self, method: str, error: Any) -> Exception:
        name, cause_name, error = self._error_parts(error)

        if cause_name in TIMEOUT_CAUSES:
            logger.error(f"RPC {method} timed out waiting for the transaction")
            return SubmissionTimeout(f"Node timed out waiting for the transaction ({cause_name})")
        if name == "INTERNAL_ERROR" or cause_name in TRANSPORT_CAUSES:
            logger.error(f"RPC {method} failed with unknown outcome: {cause_name or name}")
            return TransportError(f"Node failed to process the transaction ({cause_name or name})")

        reason = _rejection_reason(error, cause_name)
        logger.info(f"Transaction rejected: {reason}")
        info = error.get("data") if isinstance(error.get("data"), dict) else {}
        cause = error.get("cause")
        if isinstance(cause, dict) and isinstance(cause.get("info"), dict):
            info = {**cause["info"], **info}
        return SubmissionRejected(reason, cause=cause_name or name, info=info)

    # Read primitives

    def query(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("query", params)

    def block(self, finality: Optional[str] = "final", block_id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        if block_id is not None:
            return self._call("block", {"block_id": block_id})
        return self._call("block", {"finality": finality})

    def tx_status(self, tx_hash: str, sender_id: str, wait_until: TxExecutionStatus) -> Dict[str, Any]:
        return self._call("tx", {
            "tx_hash": tx_hash,
            "sender_account_id": sender_id,
            "wait_until": wait_until.rpc_name,
        })

    def experimental_protocol_config(self, finality: str = "final") -> Dict[str, Any]:
        return self._call("EXPERIMENTAL_protocol_config", {"finality": finality})

    def status(self) -> Dict[str, Any]:
        return self._call("status", [])

    def chunk(self, chunk_id: Optional[str] = None, block_id: Optional[Union[int, str]] = None, shard_id: Optional[int] = None) -> Dict[str, Any]:
        """Fetch a chunk by hash, or by block and shard."""
        if chunk_id is not None:
            return self._call("chunk", {"chunk_id": chunk_id})
        if block_id is None or shard_id is None:
            raise ValueError("Either chunk_id or both block_id and shard_id are required")
        return self._call("chunk", {"block_id": block_id, "shard_id": shard_id})

    def validators(self, block_id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        return self._call("validators", [block_id])

    def gas_price(self, block_id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        return self._call("gas_price", [block_id])

    # Submission primitives

    def send_tx(self, signed_tx_base64: str, wait_until: TxExecutionStatus) -> Dict[str, Any]:
        return self._submit_call("send_tx", {
            "signed_tx_base64": signed_tx_base64,
            "wait_until": wait_until.rpc_name,
        })

    def broadcast_tx_async(self, signed_tx_base64: str) -> str:
        """Legacy fire-and-forget submission; returns the transaction hash."""
        return self._submit_call("broadcast_tx_async", [signed_tx_base64])

    def broadcast_tx_commit(self, signed_tx_base64: str) -> Dict[str, Any]:
        """Legacy submission waiting for execution."""
        return self._submit_call("broadcast_tx_commit", [signed_tx_base64])

    def close(self) -> None:
        self.session.close()
        self.submit_session.close()

    def __enter__(self) -> "JsonRpcProvider":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"JsonRpcProvider({self.rpc_url!r})"
