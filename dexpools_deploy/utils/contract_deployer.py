"""
Contract deployment utility for the DexPools deployment toolkit

This module deploys compiled contracts by name from the artifacts directory
and returns a contract handle bound to the deployed address.

Design Notes:
- Supports contract deployment with constructor arguments
- Enforces the EIP-170 runtime size limit unless the network allows
  unlimited contract size
- Appends successful deployments to a per-network JSON record; the record
  is write-only and is never used to skip a deployment
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.contract import Contract

from .artifacts import ContractData, find_artifact
from .contract_sizer import DEPLOYED_SIZE_LIMIT
from .exceptions import ContractError, ContractSizeError, ErrorCodes
from .transaction_builder import TransactionBuilder, TransactionOptions, run_sync

LOG = logging.getLogger(__name__)


@dataclass
class DeploymentOptions(TransactionOptions):
    """Options for contract deployment"""
    confirmations: int = 1
    timeout: Optional[float] = None


@dataclass
class DeploymentResult:
    """Result of contract deployment"""
    success: bool
    contract_name: Optional[str] = None
    contract_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    deploy_time: Optional[float] = None
    error: Optional[str] = None
    contract: Optional[Contract] = None


class ContractDeployer:
    """
    Deploys contracts from compiled artifacts.
    """

    def __init__(
        self,
        web3: Web3,
        account: LocalAccount,
        artifacts_dir: Union[str, Path] = "artifacts",
        tx_builder: Optional[TransactionBuilder] = None,
        enforce_size_limit: bool = True,
        deployments_file: Optional[Union[str, Path]] = None,
        default_options: Optional[DeploymentOptions] = None
    ):
        """
        Initialize contract deployer.

        Args:
            web3: Web3 instance for blockchain interaction
            account: Account to deploy contracts with
            artifacts_dir: Directory holding compiled artifacts
            tx_builder: Transaction builder to send with (default: a new one for account)
            enforce_size_limit: Reject runtime bytecode above the EIP-170 limit
            deployments_file: JSON file successful deployments are recorded in
            default_options: Options used when a deploy call passes none
        """
        self.web3 = web3
        self.account = account
        self.artifacts_dir = Path(artifacts_dir)
        self.tx_builder = tx_builder or TransactionBuilder(web3=web3, account=account)
        self.enforce_size_limit = enforce_size_limit
        self.deployments_file = Path(deployments_file) if deployments_file else None
        self.default_options = default_options or DeploymentOptions()

        # Contract data cache
        self._contract_cache: Dict[str, ContractData] = {}

    def load_contract_data(self, contract_name: str) -> ContractData:
        """
        Load contract data from the artifacts directory.

        Args:
            contract_name: Name (or fully qualified name) of the contract

        Returns:
            ContractData with bytecode and ABI

        Raises:
            ArtifactError: If the artifact is not found or invalid
        """
        if contract_name not in self._contract_cache:
            self._contract_cache[contract_name] = find_artifact(self.artifacts_dir, contract_name)
            LOG.debug(f"Loaded contract data for {contract_name}")
        return self._contract_cache[contract_name]

    async def deploy(
        self,
        contract_name: str,
        constructor_args: Optional[List[Any]] = None,
        options: Optional[DeploymentOptions] = None
    ) -> DeploymentResult:
        """
        Deploy a contract by name.

        Args:
            contract_name: Name of the contract to deploy
            constructor_args: Constructor arguments
            options: Deployment options

        Returns:
            DeploymentResult with deployment details
        """
        opts = options or self.default_options
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        try:
            contract_data = self.load_contract_data(contract_name)
            result = await self.deploy_from_data(contract_data, constructor_args, opts)
        except ContractSizeError:
            raise
        except Exception as e:
            LOG.debug(f"Deployment of {contract_name} failed", exc_info=True)
            result = DeploymentResult(success=False, error=str(e))

        result.contract_name = contract_name
        result.deploy_time = loop.time() - start_time

        if result.success:
            self._record_deployment(contract_name, result)

        return result

    async def deploy_from_data(
        self,
        contract_data: ContractData,
        constructor_args: Optional[List[Any]] = None,
        options: Optional[DeploymentOptions] = None
    ) -> DeploymentResult:
        """
        Deploy a contract from ContractData.

        Args:
            contract_data: Contract bytecode and ABI
            constructor_args: Constructor arguments
            options: Deployment options

        Returns:
            DeploymentResult with deployment details
        """
        opts = options or self.default_options
        self._check_size(contract_data)

        factory = self.web3.eth.contract(
            abi=contract_data.abi,
            bytecode=contract_data.bytecode
        )
        constructor = factory.constructor(*(constructor_args or []))

        base_tx = await self.tx_builder.base_transaction(opts)
        try:
            tx_data = await run_sync(constructor.build_transaction, base_tx)
        except Exception as e:
            raise ContractError(
                f"Failed to build deployment transaction: {e}",
                contract_name=contract_data.contract_name,
                cause=e
            )

        result = await self.tx_builder.send_transaction(
            transaction=tx_data,
            wait_for_receipt=True,
            timeout=opts.timeout
        )

        if not result.success:
            return DeploymentResult(
                success=False,
                transaction_hash=result.tx_hash,
                block_number=result.block_number,
                gas_used=result.gas_used,
                error=result.error or "Transaction failed"
            )

        if opts.confirmations > 1:
            await self._wait_for_confirmations(
                result.block_number,
                opts.confirmations - 1,
                timeout=opts.timeout or self.tx_builder.timeout
            )

        contract_address = result.tx_receipt['contractAddress']
        deployed_contract = self.web3.eth.contract(
            address=contract_address,
            abi=contract_data.abi
        )

        return DeploymentResult(
            success=True,
            contract_address=contract_address,
            transaction_hash=result.tx_hash,
            block_number=result.block_number,
            gas_used=result.gas_used,
            contract=deployed_contract
        )

    def _check_size(self, contract_data: ContractData) -> None:
        """Reject contracts the network would refuse under EIP-170"""
        if not self.enforce_size_limit:
            return
        size = contract_data.deployed_size
        if size > DEPLOYED_SIZE_LIMIT:
            raise ContractSizeError(
                f"{contract_data.contract_name} runtime bytecode is {size} bytes, "
                f"above the {DEPLOYED_SIZE_LIMIT} byte limit",
                contract_name=contract_data.contract_name,
                details={"deployed_size": size, "limit": DEPLOYED_SIZE_LIMIT}
            )

    def _record_deployment(self, contract_name: str, result: DeploymentResult) -> None:
        """Append a successful deployment to the deployments file"""
        if self.deployments_file is None or not result.contract_address:
            return

        records: Dict[str, Dict] = {}
        if self.deployments_file.exists():
            with open(self.deployments_file, 'r') as f:
                records = json.load(f)

        records[contract_name] = {
            'address': result.contract_address,
            'transaction_hash': result.transaction_hash,
            'block_number': result.block_number,
            'deployed_at': datetime.now(timezone.utc).isoformat()
        }

        self.deployments_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.deployments_file, 'w') as f:
            json.dump(records, f, indent=2)

    async def _wait_for_confirmations(
        self,
        block_number: int,
        confirmations: int,
        timeout: float
    ) -> None:
        """Wait for block confirmations"""
        target_block = block_number + confirmations
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        current_block = await run_sync(lambda: self.web3.eth.block_number)
        while current_block < target_block:
            if loop.time() - start_time > timeout:
                raise ContractError(
                    f"Confirmation timeout: waited {timeout}s for {confirmations} confirmations",
                    code=ErrorCodes.TRANSACTION_TIMEOUT
                )
            await asyncio.sleep(self.tx_builder.poll_latency)
            current_block = await run_sync(lambda: self.web3.eth.block_number)
