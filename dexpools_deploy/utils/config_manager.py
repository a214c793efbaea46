"""
Configuration manager with JSON schema validation

This module loads the deployment configuration: the static network table,
build settings (ABI exporter, contract sizer, solidity constants) and the
signer keys supplied through environment variables.

Design Notes:
- Uses jsonschema for configuration validation
- Loads a local .env file with python-dotenv before reading signer keys
- Environment variable overrides for RPC URLs and the transaction timeout
- Signer keys are resolved but never validated here; a missing key only
  fails once a transaction has to be signed
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema
from dotenv import load_dotenv

from .exceptions import ConfigurationError, ErrorCodes

LOG = logging.getLogger(__name__)

ENV_PREFIX = "DEXPOOLS_DEPLOY_"
DEFAULT_CONFIG_FILE = "deploy_config.json"
DEFAULT_CONFIG_DIR = Path(__file__).parent.parent / "configs"


@dataclass
class ValidationResult:
    """Result of configuration validation"""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    validated_config: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class NetworkProfile:
    """A target network: RPC endpoint, chain ID and signer credential"""
    name: str
    url: str
    chain_id: int
    accounts_env: Optional[str] = None
    private_key: Optional[str] = field(default=None, repr=False)
    allow_unlimited_contract_size: bool = False
    gas_price: Optional[int] = None
    gas: Optional[int] = None

    @property
    def has_credential(self) -> bool:
        return bool(self.private_key)


@dataclass(frozen=True)
class AbiExporterSettings:
    path: str = "abis"
    clear: bool = False
    flat: bool = False
    only: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ContractSizerSettings:
    alpha_sort: bool = False
    disambiguate_paths: bool = False
    run_on_compile: bool = False
    strict: bool = False


@dataclass(frozen=True)
class SoliditySettings:
    version: str = "0.8.9"
    optimizer_enabled: bool = False
    optimizer_runs: int = 200


@dataclass(frozen=True)
class TransactionSettings:
    timeout: float = 120.0
    poll_latency: float = 1.0
    confirmations: int = 1


@dataclass
class DeployConfiguration:
    """Validated deployment configuration"""
    networks: Dict[str, NetworkProfile]
    default_network: Optional[str] = None
    artifacts_dir: Path = Path("artifacts")
    deployments_dir: Path = Path("deployments")
    solidity: SoliditySettings = field(default_factory=SoliditySettings)
    abi_exporter: AbiExporterSettings = field(default_factory=AbiExporterSettings)
    contract_sizer: ContractSizerSettings = field(default_factory=ContractSizerSettings)
    transaction: TransactionSettings = field(default_factory=TransactionSettings)
    config_file: Optional[str] = None

    def get_network(self, name: Optional[str] = None) -> NetworkProfile:
        """Return the named network profile, or the default one"""
        name = name or self.default_network
        if name is None:
            raise ConfigurationError(
                "No network selected and no default_network configured",
                config_file=self.config_file,
                field="default_network",
                code=ErrorCodes.UNKNOWN_NETWORK
            )
        try:
            return self.networks[name]
        except KeyError:
            known = ", ".join(sorted(self.networks))
            raise ConfigurationError(
                f"Unknown network '{name}' (configured: {known})",
                config_file=self.config_file,
                field="networks",
                code=ErrorCodes.UNKNOWN_NETWORK
            ) from None


class ConfigManager:
    """
    Loads and validates the deployment configuration.

    The default configuration ships inside the package; a different
    directory (or an explicit file path) can be given for other setups.
    """

    def __init__(
        self,
        config_dir: Optional[Union[str, Path]] = None,
        schema_dir: Optional[Union[str, Path]] = None
    ):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing configuration files (default: packaged configs/)
            schema_dir: Directory containing JSON schemas (default: packaged configs/schemas/)
        """
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR
        self.schema_dir = Path(schema_dir) if schema_dir else DEFAULT_CONFIG_DIR / "schemas"
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def _load_schema(self, schema_name: str) -> Dict[str, Any]:
        """Load a JSON schema from file or cache"""
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_file = self.schema_dir / f"{schema_name}_schema.json"
        if not schema_file.exists():
            raise FileNotFoundError(schema_file)

        try:
            with open(schema_file, 'r') as f:
                schema = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in schema file {schema_file}: {e}",
                config_file=str(schema_file),
                code=ErrorCodes.CONFIG_VALIDATION_FAILED
            )
        self._schemas[schema_name] = schema
        return schema

    def _validate_config(self, config: Dict[str, Any], schema: Dict[str, Any]) -> ValidationResult:
        """Validate configuration against a schema"""
        validator = jsonschema.Draft7Validator(schema)
        errors = []
        for error in sorted(validator.iter_errors(config), key=lambda e: [str(p) for p in e.path]):
            if error.path:
                path = " -> ".join(str(p) for p in error.path)
                errors.append(f"'{path}' {error.message}")
            else:
                errors.append(error.message)

        if errors:
            return ValidationResult(is_valid=False, errors=errors)
        return ValidationResult(is_valid=True, validated_config=config)

    def _get_env_override(self, key: str, default: Any = None) -> Any:
        """Get environment variable override"""
        return os.getenv(f"{ENV_PREFIX}{key.upper()}", default)

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration"""
        # Deep copy to avoid modifying original
        result = json.loads(json.dumps(config))

        for name, network in result.get('networks', {}).items():
            network['url'] = self._get_env_override(f"{name}_URL", network.get('url'))

        timeout = self._get_env_override("TX_TIMEOUT")
        if timeout is not None:
            try:
                result.setdefault('transaction', {})['timeout'] = int(timeout)
            except ValueError:
                LOG.warning(f"Invalid integer value for {ENV_PREFIX}TX_TIMEOUT: {timeout}")

        return result

    def load_config(
        self,
        filename: str = DEFAULT_CONFIG_FILE,
        validate: bool = True,
        schema_name: Optional[str] = None,
        apply_env_overrides: bool = True
    ) -> Dict[str, Any]:
        """
        Load and validate a configuration file.

        Args:
            filename: Configuration filename, relative to config_dir or absolute
            validate: Whether to validate against a schema
            schema_name: Schema name to use for validation
            apply_env_overrides: Whether to apply environment variable overrides

        Returns:
            Validated configuration dictionary

        Raises:
            ConfigurationError: If configuration is invalid or missing
        """
        config_file = self.config_dir / filename

        if not config_file.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_file}",
                config_file=str(config_file),
                code=ErrorCodes.CONFIG_FILE_NOT_FOUND
            )

        try:
            with open(config_file, 'r') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in configuration file {config_file}: {e}",
                config_file=str(config_file),
                code=ErrorCodes.CONFIG_VALIDATION_FAILED
            )

        if apply_env_overrides:
            config = self._apply_env_overrides(config)

        if validate:
            schema_name = schema_name or Path(filename).stem
            try:
                schema = self._load_schema(schema_name)
            except FileNotFoundError:
                LOG.warning(f"No schema found for {filename}, skipping validation")
            else:
                validation = self._validate_config(config, schema)
                if not validation.is_valid:
                    error_msg = f"Configuration validation failed for {filename}:\n"
                    error_msg += "\n".join(f"  - {error}" for error in validation.errors)
                    raise ConfigurationError(
                        error_msg,
                        config_file=str(config_file),
                        code=ErrorCodes.CONFIG_VALIDATION_FAILED
                    )

        return config

    def load_deploy_config(
        self,
        filename: str = DEFAULT_CONFIG_FILE,
        env_file: Optional[Union[str, Path]] = ".env"
    ) -> DeployConfiguration:
        """
        Load the deployment configuration and resolve signer keys.

        Args:
            filename: Configuration filename
            env_file: .env file loaded before reading keys (None to skip).
                Variables already present in the environment win.

        Returns:
            DeployConfiguration
        """
        if env_file is not None and Path(env_file).exists():
            load_dotenv(env_file, override=False)

        raw = self.load_config(filename, schema_name="deploy_config")
        config_file = str(self.config_dir / filename)

        networks = {}
        for name, entry in raw['networks'].items():
            accounts_env = entry.get('accounts_env')
            private_key = os.getenv(accounts_env) if accounts_env else None
            networks[name] = NetworkProfile(
                name=name,
                url=entry['url'],
                chain_id=entry['chain_id'],
                accounts_env=accounts_env,
                private_key=private_key or None,
                allow_unlimited_contract_size=entry.get('allow_unlimited_contract_size', False),
                gas_price=entry.get('gas_price'),
                gas=entry.get('gas')
            )

        default_network = raw.get('default_network')
        if default_network is not None and default_network not in networks:
            raise ConfigurationError(
                f"default_network '{default_network}' is not a configured network",
                config_file=config_file,
                field="default_network",
                code=ErrorCodes.UNKNOWN_NETWORK
            )

        paths = raw.get('paths', {})
        solidity = raw.get('solidity', {})
        optimizer = solidity.get('optimizer', {})
        exporter = raw.get('abi_exporter', {})

        return DeployConfiguration(
            networks=networks,
            default_network=default_network,
            artifacts_dir=Path(paths.get('artifacts', 'artifacts')),
            deployments_dir=Path(paths.get('deployments', 'deployments')),
            solidity=SoliditySettings(
                version=solidity.get('version', SoliditySettings.version),
                optimizer_enabled=optimizer.get('enabled', False),
                optimizer_runs=optimizer.get('runs', SoliditySettings.optimizer_runs)
            ),
            abi_exporter=AbiExporterSettings(
                path=exporter.get('path', AbiExporterSettings.path),
                clear=exporter.get('clear', False),
                flat=exporter.get('flat', False),
                only=list(exporter.get('only', [])),
                exclude=list(exporter.get('except', []))
            ),
            contract_sizer=ContractSizerSettings(**raw.get('contract_sizer', {})),
            transaction=TransactionSettings(**raw.get('transaction', {})),
            config_file=config_file
        )


def load_deploy_config(
    config_path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = ".env"
) -> DeployConfiguration:
    """Load the packaged configuration, or the file at config_path"""
    if config_path is None:
        return ConfigManager().load_deploy_config(env_file=env_file)
    config_path = Path(config_path)
    manager = ConfigManager(config_dir=config_path.parent, schema_dir=DEFAULT_CONFIG_DIR / "schemas")
    return manager.load_deploy_config(config_path.name, env_file=env_file)
