"""
Tests for response models.
"""
import base64

import pytest
from pydantic import ValidationError

from nearapi_sdk.exceptions import DelegateActionExpired, ExecutionFailed
from nearapi_sdk.models import (
    AccessKeyView,
    AccountView,
    BlockInfo,
    CallResult,
    TxExecutionResponse,
    TxExecutionStatus,
)
from nearapi_sdk.utils import b58encode


class TestTxExecutionStatus:
    """Finality levels are totally ordered."""

    def test_order(self):
        levels = list(TxExecutionStatus)
        assert levels == sorted(levels)
        assert [level.rpc_name for level in levels] == [
            "NONE", "INCLUDED", "EXECUTED_OPTIMISTIC", "INCLUDED_FINAL", "EXECUTED", "FINAL",
        ]

    @pytest.mark.parametrize("value, expected", [
        ("FINAL", TxExecutionStatus.FINAL),
        ("executed_optimistic", TxExecutionStatus.EXECUTED_OPTIMISTIC),
        (3, TxExecutionStatus.INCLUDED_FINAL),
        (TxExecutionStatus.NONE, TxExecutionStatus.NONE),
    ])
    def test_from_rpc(self, value, expected):
        assert TxExecutionStatus.from_rpc(value) is expected

    @pytest.mark.parametrize("value", ["DONE", "", None, True, 6])
    def test_from_rpc_invalid(self, value):
        with pytest.raises(ValueError):
            TxExecutionStatus.from_rpc(value)


class TestTxExecutionResponse:
    """Parsing and inspection of execution outcomes."""

    def test_none_level(self):
        response = TxExecutionResponse.model_validate({"final_execution_status": "NONE", "transaction_hash": "h"})
        assert response.final_execution_status == TxExecutionStatus.NONE
        assert not response.has_outcome
        assert not response.is_success
        assert response.tokens_burnt == 0

    def test_missing_status_defaults_to_none(self):
        assert TxExecutionResponse.model_validate({}).final_execution_status == TxExecutionStatus.NONE

    def test_keyword_construction_matches_wire_parsing(self):
        built = TxExecutionResponse(final_execution_status=TxExecutionStatus.FINAL, status={"SuccessValue": ""}, transaction_hash="h")
        parsed = TxExecutionResponse.model_validate({"final_execution_status": "FINAL", "status": {"SuccessValue": ""}, "transaction_hash": "h"})
        assert built == parsed
        assert TxExecutionResponse.model_validate(built.model_dump()) == built

    def test_success(self):
        response = TxExecutionResponse.model_validate({
            "final_execution_status": "FINAL",
            "status": {"SuccessValue": base64.b64encode(b'"ok"').decode()},
            "transaction": {"signer_id": "alice.testnet"},
            "transaction_outcome": {"outcome": {"tokens_burnt": "10"}},
            "receipts_outcome": [
                {"outcome": {"executor_id": "bob.testnet", "tokens_burnt": "5"}},
                {"outcome": {"executor_id": "alice.testnet", "tokens_burnt": "0"}},
            ],
        })
        assert response.is_success
        assert response.success_value == b'"ok"'
        assert response.signer_id == "alice.testnet"
        assert response.receipt_executor_ids == ["bob.testnet", "alice.testnet"]
        assert response.tokens_burnt == 15
        response.raise_for_failure()

    def test_empty_success_value(self):
        response = TxExecutionResponse.model_validate({"final_execution_status": "FINAL", "status": {"SuccessValue": ""}})
        assert response.success_value == b""

    def test_failure(self):
        failure = {"ActionError": {"index": 0, "kind": {"AccountDoesNotExist": {"account_id": "x.testnet"}}}}
        response = TxExecutionResponse.model_validate({"final_execution_status": "FINAL", "status": {"Failure": failure}})
        assert not response.is_success
        assert response.failure == failure
        with pytest.raises(ExecutionFailed) as exc_info:
            response.raise_for_failure()
        assert not isinstance(exc_info.value, DelegateActionExpired)
        assert exc_info.value.failure == failure

    def test_delegate_expired(self):
        failure = {"ActionError": {"index": 0, "kind": "DelegateActionExpired"}}
        response = TxExecutionResponse.model_validate({"final_execution_status": "FINAL", "status": {"Failure": failure}})
        with pytest.raises(DelegateActionExpired):
            response.raise_for_failure()

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TxExecutionResponse.model_validate({"final_execution_status": "DONE"})


def test_block_info_hash_bytes():
    block = BlockInfo(hash=b58encode(bytes(range(32))), height=5)
    assert block.hash_bytes == bytes(range(32))


def test_access_key_view():
    assert AccessKeyView.model_validate({"nonce": 1, "permission": "FullAccess"}).is_full_access
    view = AccessKeyView.model_validate({
        "nonce": 2,
        "permission": {"FunctionCall": {"allowance": None, "receiver_id": "app.testnet", "method_names": []}},
    })
    assert not view.is_full_access


def test_account_view_balances_from_strings():
    view = AccountView.model_validate({
        "amount": "100000000000000000000000000", "locked": "0", "code_hash": "1" * 32, "storage_usage": 182,
    })
    assert view.amount == 10 ** 26
    assert view.locked == 0


def test_call_result_decoding():
    result = CallResult.model_validate({"result": list(b"[1,2]"), "logs": []})
    assert result.raw == b"[1,2]"
    assert result.decode_json() == [1, 2]
