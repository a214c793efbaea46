"""
Network-bound deployment environment.

A DeployEnvironment is what every deploy script receives: the selected
network profile, a Web3 connection to it, the signer account and the
builder/deployer pair that sign with it. Connections and the signer are
created lazily, so a missing signer key only fails once something has to
be signed.
"""

import logging
from pathlib import Path
from typing import Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from ..utils.config_manager import DeployConfiguration, NetworkProfile
from ..utils.contract_deployer import ContractDeployer, DeploymentOptions
from ..utils.exceptions import ConfigurationError, ErrorCodes
from ..utils.transaction_builder import TransactionBuilder, TransactionOptions, run_sync

LOG = logging.getLogger(__name__)


class DeployEnvironment:
    """Deployment context for one network and one signer"""

    def __init__(
        self,
        config: DeployConfiguration,
        network_name: Optional[str] = None,
        root: Optional[Path] = None
    ):
        self.config = config
        self.network: NetworkProfile = config.get_network(network_name)
        self.root = Path(root) if root else Path.cwd()
        self._web3: Optional[Web3] = None
        self._account: Optional[LocalAccount] = None
        self._tx_builder: Optional[TransactionBuilder] = None
        self._deployer: Optional[ContractDeployer] = None

    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            provider = Web3.HTTPProvider(
                self.network.url,
                request_kwargs={"timeout": self.config.transaction.timeout}
            )
            self._web3 = Web3(provider)
        return self._web3

    @property
    def account(self) -> LocalAccount:
        if self._account is None:
            if not self.network.private_key:
                raise ConfigurationError(
                    f"No signer key for network '{self.network.name}': "
                    f"set {self.network.accounts_env}",
                    field=self.network.accounts_env,
                    code=ErrorCodes.MISSING_CREDENTIAL
                )
            self._account = Account.from_key(self.network.private_key)
        return self._account

    @property
    def tx_builder(self) -> TransactionBuilder:
        if self._tx_builder is None:
            self._tx_builder = TransactionBuilder(
                web3=self.web3,
                account=self.account,
                default_options=TransactionOptions(
                    gas_limit=self.network.gas,
                    gas_price=self.network.gas_price
                ),
                timeout=self.config.transaction.timeout,
                poll_latency=self.config.transaction.poll_latency
            )
        return self._tx_builder

    @property
    def deployer(self) -> ContractDeployer:
        if self._deployer is None:
            self._deployer = ContractDeployer(
                web3=self.web3,
                account=self.account,
                artifacts_dir=self.root / self.config.artifacts_dir,
                tx_builder=self.tx_builder,
                enforce_size_limit=not self.network.allow_unlimited_contract_size,
                deployments_file=self.root / self.config.deployments_dir / f"{self.network.name}.json",
                default_options=DeploymentOptions(
                    confirmations=self.config.transaction.confirmations
                )
            )
        return self._deployer

    async def connect(self) -> None:
        """Check that the RPC endpoint serves the configured chain"""
        chain_id = await run_sync(lambda: self.web3.eth.chain_id)
        if chain_id != self.network.chain_id:
            raise ConfigurationError(
                f"Network '{self.network.name}' expects chain ID {self.network.chain_id}, "
                f"but {self.network.url} reports {chain_id}",
                field="chain_id",
                code=ErrorCodes.CHAIN_ID_MISMATCH
            )
        LOG.info(f"Connected to {self.network.name} (chain {chain_id})")
