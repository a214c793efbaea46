"""
Pytest configuration and fixtures for the deployment toolkit tests.

No test talks to a real node: Web3 is replaced with a Mock and compiled
artifacts are written to a temporary directory in the compiler's layout.
"""

import json
import logging
from pathlib import Path
from unittest.mock import Mock

import pytest
from eth_account import Account

from dexpools_deploy.utils.config_manager import load_deploy_config

OWNER = "0xEd8c1D2f12751dB7Ee414DA7f046DFee7A3F2C65"
DEPLOYED_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

SIGNER_ENV_VARS = ("HARDHAT_KEY", "ETHEREUM_MAINNET_KEY", "METIS_MAINNET_KEY")

OWNABLE_ABI = [
    {"type": "constructor", "inputs": [], "stateMutability": "nonpayable"},
    {
        "type": "function",
        "name": "transferOwnership",
        "inputs": [{"name": "newOwner", "type": "address"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
]


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging() replaces root handlers; put them back after each test"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove signer keys and overrides inherited from the developer's shell"""
    for name in SIGNER_ENV_VARS + ("DEXPOOLS_DEPLOY_TX_TIMEOUT",):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def test_account():
    return Account.create()


@pytest.fixture
def mock_web3():
    """Mock Web3 instance answering for Metis Andromeda"""
    web3 = Mock()
    web3.eth.chain_id = 1088
    web3.eth.gas_price = 20000000000
    web3.eth.block_number = 100
    web3.eth.get_transaction_count = Mock(return_value=0)
    return web3


@pytest.fixture
def artifacts_dir(tmp_path) -> Path:
    path = tmp_path / "artifacts"
    path.mkdir()
    return path


@pytest.fixture
def write_artifact(artifacts_dir):
    """Write an artifact the way the compiler lays it out"""

    def _write(
        contract_name: str,
        source_name: str = None,
        abi=None,
        bytecode: str = "0x6080604052",
        deployed_bytecode: str = "0x60806040",
    ) -> Path:
        source_name = source_name or f"contracts/{contract_name}.sol"
        directory = artifacts_dir / source_name
        directory.mkdir(parents=True, exist_ok=True)
        artifact = {
            "_format": "hh-sol-artifact-1",
            "contractName": contract_name,
            "sourceName": source_name,
            "abi": OWNABLE_ABI if abi is None else abi,
            "bytecode": bytecode,
            "deployedBytecode": deployed_bytecode,
            "linkReferences": {},
            "deployedLinkReferences": {},
        }
        path = directory / f"{contract_name}.json"
        path.write_text(json.dumps(artifact))
        (directory / f"{contract_name}.dbg.json").write_text(
            json.dumps({"_format": "hh-sol-dbg-1", "buildInfo": "../../build-info/x.json"})
        )
        return path

    return _write


@pytest.fixture
def deploy_config(clean_env):
    """Packaged configuration without any signer keys"""
    return load_deploy_config(env_file=None)
