"""Tests for artifact loading and contract deployment"""

import json
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from dexpools_deploy.utils.artifacts import find_artifact, iter_artifacts
from dexpools_deploy.utils.contract_deployer import (
    ContractDeployer,
    DeploymentOptions,
    DeploymentResult
)
from dexpools_deploy.utils.exceptions import ArtifactError, ContractSizeError, ErrorCodes
from dexpools_deploy.utils.transaction_builder import TransactionResult

from ..conftest import DEPLOYED_ADDRESS, OWNABLE_ABI


class TestArtifacts:

    def test_find_artifact(self, artifacts_dir, write_artifact):
        write_artifact("TradeManager", "contracts/otc/TradeManager.sol")

        data = find_artifact(artifacts_dir, "TradeManager")

        assert data.contract_name == "TradeManager"
        assert data.source_name == "contracts/otc/TradeManager.sol"
        assert data.abi == OWNABLE_ABI
        assert data.fully_qualified_name == "contracts/otc/TradeManager.sol:TradeManager"

    def test_missing_artifact(self, artifacts_dir):
        with pytest.raises(ArtifactError) as exc_info:
            find_artifact(artifacts_dir, "MissingContract")

        assert "not found" in str(exc_info.value)
        assert exc_info.value.code == ErrorCodes.ARTIFACT_NOT_FOUND

    def test_ambiguous_artifact(self, artifacts_dir, write_artifact):
        write_artifact("Token", "contracts/a/Token.sol")
        write_artifact("Token", "contracts/b/Token.sol")

        with pytest.raises(ArtifactError) as exc_info:
            find_artifact(artifacts_dir, "Token")
        assert exc_info.value.code == ErrorCodes.ARTIFACT_AMBIGUOUS

        data = find_artifact(artifacts_dir, "contracts/b/Token.sol:Token")
        assert data.source_name == "contracts/b/Token.sol"

    def test_iter_skips_debug_and_build_info(self, artifacts_dir, write_artifact):
        write_artifact("TradeManager")
        write_artifact("TransactionManager")
        build_info = artifacts_dir / "build-info"
        build_info.mkdir()
        (build_info / "abc123.json").write_text(json.dumps({"input": {}, "output": {}}))

        names = [data.contract_name for data in iter_artifacts(artifacts_dir)]

        assert names == ["TradeManager", "TransactionManager"]

    def test_invalid_artifact(self, artifacts_dir):
        path = artifacts_dir / "contracts" / "Broken.sol"
        path.mkdir(parents=True)
        (path / "Broken.json").write_text(json.dumps({"contractName": "Broken", "abi": []}))

        with pytest.raises(ArtifactError) as exc_info:
            find_artifact(artifacts_dir, "Broken")

        assert "bytecode" in exc_info.value.message


class TestContractDeployer:

    @pytest.fixture
    def handle(self):
        return Mock(address=DEPLOYED_ADDRESS)

    @pytest.fixture
    def factory(self):
        factory = Mock()
        factory.constructor.return_value.build_transaction = Mock(
            side_effect=lambda base: dict(base, data="0x6080604052", gas=900000)
        )
        return factory

    @pytest.fixture
    def deployer(self, mock_web3, test_account, artifacts_dir, tmp_path, factory, handle):
        def contract(address=None, abi=None, bytecode=None):
            return handle if address else factory

        mock_web3.eth.contract = Mock(side_effect=contract)
        deployer = ContractDeployer(
            mock_web3,
            test_account,
            artifacts_dir=artifacts_dir,
            deployments_file=tmp_path / "deployments" / "metis_main.json"
        )
        deployer.tx_builder.send_transaction = AsyncMock(return_value=TransactionResult(
            tx_hash="0xabc",
            tx_receipt={"status": 1, "contractAddress": DEPLOYED_ADDRESS},
            success=True,
            gas_used=850000,
            block_number=10
        ))
        return deployer

    def test_load_contract_data_is_cached(self, deployer, write_artifact):
        path = write_artifact("TradeManager")

        first = deployer.load_contract_data("TradeManager")
        path.unlink()
        second = deployer.load_contract_data("TradeManager")

        assert first is second

    @pytest.mark.asyncio
    async def test_deploy(self, deployer, write_artifact, factory, handle, test_account):
        write_artifact("DexpoolsToken")
        forwarder = "0xaD1628acd4a895efb1Ad94CC4471B3917CF90D91"

        result = await deployer.deploy("DexpoolsToken", [forwarder])

        assert result.success
        assert result.contract is handle
        assert result.contract_address == DEPLOYED_ADDRESS
        assert result.transaction_hash == "0xabc"
        assert result.contract_name == "DexpoolsToken"
        assert result.deploy_time is not None
        factory.constructor.assert_called_once_with(forwarder)

        sent = deployer.tx_builder.send_transaction.call_args.kwargs["transaction"]
        assert sent["from"] == test_account.address
        assert sent["data"] == "0x6080604052"

    @pytest.mark.asyncio
    async def test_deploy_records_address(self, deployer, write_artifact):
        write_artifact("TradeManager")

        await deployer.deploy("TradeManager")

        records = json.loads(deployer.deployments_file.read_text())
        assert records["TradeManager"]["address"] == DEPLOYED_ADDRESS
        assert records["TradeManager"]["transaction_hash"] == "0xabc"
        assert records["TradeManager"]["block_number"] == 10
        deployed_at = datetime.fromisoformat(records["TradeManager"]["deployed_at"])
        assert deployed_at.utcoffset() == timedelta(0)

    @pytest.mark.asyncio
    async def test_reverted_deployment(self, deployer, write_artifact):
        write_artifact("TradeManager")
        deployer.tx_builder.send_transaction.return_value = TransactionResult(
            tx_hash="0xdead", success=False, error="Transaction reverted: 0xdead"
        )

        result = await deployer.deploy("TradeManager")

        assert not result.success
        assert result.transaction_hash == "0xdead"
        assert "reverted" in result.error
        assert not deployer.deployments_file.exists()

    @pytest.mark.asyncio
    async def test_missing_artifact_is_reported(self, deployer):
        result = await deployer.deploy("NoSuchContract")

        assert not result.success
        assert "not found" in result.error
        deployer.tx_builder.send_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_size_limit(self, deployer, write_artifact):
        write_artifact("Huge", deployed_bytecode="0x" + "00" * 24577)

        with pytest.raises(ContractSizeError):
            await deployer.deploy("Huge")

        deployer.tx_builder.send_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_unlimited_contract_size(self, deployer, write_artifact):
        write_artifact("Huge", deployed_bytecode="0x" + "00" * 24577)
        deployer.enforce_size_limit = False

        result = await deployer.deploy("Huge")

        assert result.success

    @pytest.mark.asyncio
    async def test_waits_for_confirmations(self, deployer, write_artifact, mock_web3):
        write_artifact("TradeManager")
        mock_web3.eth.block_number = 12

        result = await deployer.deploy("TradeManager", options=DeploymentOptions(confirmations=3))

        assert result.success

    @pytest.mark.asyncio
    async def test_default_confirmations(self, deployer, write_artifact):
        write_artifact("TradeManager")
        deployer.default_options = DeploymentOptions(confirmations=3)
        deployer._wait_for_confirmations = AsyncMock()

        await deployer.deploy("TradeManager")

        deployer._wait_for_confirmations.assert_awaited_once()
        assert deployer._wait_for_confirmations.await_args[0][:2] == (10, 2)

    @pytest.mark.asyncio
    async def test_single_confirmation_does_not_wait(self, deployer, write_artifact):
        write_artifact("TradeManager")
        deployer._wait_for_confirmations = AsyncMock()

        await deployer.deploy("TradeManager")

        deployer._wait_for_confirmations.assert_not_awaited()

    def test_deployment_result(self):
        result = DeploymentResult(
            success=True,
            contract_address="0xabc123",
            transaction_hash="0xdef456",
            gas_used=21000
        )

        assert result.success
        assert result.contract is None
        assert result.gas_used == 21000
