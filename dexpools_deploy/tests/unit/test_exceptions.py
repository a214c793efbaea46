"""Tests for the toolkit exception hierarchy"""

from dexpools_deploy.utils.exceptions import (
    ArtifactError,
    ConfigurationError,
    ContractError,
    ContractSizeError,
    DeployError,
    ErrorCodes,
    TransactionError
)


class TestExceptions:

    def test_base_exception(self):
        error = DeployError("Test error", code=1001)

        assert error.message == "Test error"
        assert error.code == 1001
        assert str(error) == "[1001] Test error"

        error_dict = error.to_dict()
        assert error_dict["error"] == "DeployError"
        assert error_dict["message"] == "Test error"
        assert error_dict["code"] == 1001

    def test_default_codes(self):
        assert DeployError("x").code == ErrorCodes.UNKNOWN
        assert ConfigurationError("x").code == ErrorCodes.CONFIG_VALIDATION_FAILED
        assert ContractError("x").code == ErrorCodes.CONTRACT_DEPLOY_FAILED
        assert ContractSizeError("x").code == ErrorCodes.CONTRACT_SIZE_EXCEEDED
        assert TransactionError("x").code == ErrorCodes.TRANSACTION_FAILED

    def test_transaction_error(self):
        error = TransactionError(
            "transferOwnership failed",
            tx_hash="0x123",
            from_address="0xabc",
            to_address="0xdef",
            label="transferOwnership"
        )

        assert error.tx_hash == "0x123"
        assert error.details == {
            "tx_hash": "0x123",
            "from_address": "0xabc",
            "to_address": "0xdef",
            "label": "transferOwnership",
        }

    def test_configuration_error(self):
        error = ConfigurationError(
            "Invalid config",
            config_file="/path/to/deploy_config.json",
            field="networks"
        )

        assert error.details["config_file"] == "/path/to/deploy_config.json"
        assert error.details["field"] == "networks"

    def test_cause_is_chained(self):
        cause = ValueError("boom")
        error = ContractError("Deployment failed", contract_name="TradeManager", cause=cause)

        assert error.__cause__ is cause
        assert error.details["contract_name"] == "TradeManager"
        assert error.to_dict()["cause"] == repr(cause)

    def test_hierarchy(self):
        assert issubclass(ArtifactError, ContractError)
        assert issubclass(ContractSizeError, ContractError)
        for cls in (ConfigurationError, ContractError, TransactionError):
            assert issubclass(cls, DeployError)
