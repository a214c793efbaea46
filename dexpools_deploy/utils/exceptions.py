"""
Exception hierarchy for the DexPools deployment toolkit.

Every error raised by the toolkit derives from DeployError so that the script
runner can treat them uniformly: any of them terminates a deploy script with
a non-zero exit code.
"""

from typing import Any, Dict, Optional


class ErrorCodes:
    """Numeric error codes attached to toolkit exceptions"""
    UNKNOWN = 1000

    # Configuration
    CONFIG_FILE_NOT_FOUND = 1101
    CONFIG_VALIDATION_FAILED = 1102
    UNKNOWN_NETWORK = 1103
    MISSING_CREDENTIAL = 1104
    CHAIN_ID_MISMATCH = 1105

    # Artifacts and contracts
    ARTIFACT_NOT_FOUND = 1201
    ARTIFACT_INVALID = 1202
    ARTIFACT_AMBIGUOUS = 1203
    ABI_EXPORT_CONFLICT = 1204
    CONTRACT_DEPLOY_FAILED = 1205
    CONTRACT_SIZE_EXCEEDED = 1206

    # Transactions
    TRANSACTION_FAILED = 1301
    TRANSACTION_REVERTED = 1302
    TRANSACTION_TIMEOUT = 1303
    SIGNING_FAILED = 1304


class DeployError(Exception):
    """Base exception class for the deployment toolkit"""

    default_code = ErrorCodes.UNKNOWN

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None
    ):
        self.message = message
        self.code = code if code is not None else self.default_code
        self.details = details or {}
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logs and reports"""
        result = {
            "error": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "details": dict(self.details),
        }
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result


class ConfigurationError(DeployError):
    """Invalid or incomplete configuration"""

    default_code = ErrorCodes.CONFIG_VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        field: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", None) or {}
        if config_file is not None:
            details["config_file"] = config_file
        if field is not None:
            details["field"] = field
        super().__init__(message, details=details, **kwargs)


class ContractError(DeployError):
    """Contract loading or deployment error"""

    default_code = ErrorCodes.CONTRACT_DEPLOY_FAILED

    def __init__(self, message: str, contract_name: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if contract_name is not None:
            details["contract_name"] = contract_name
        self.contract_name = contract_name
        super().__init__(message, details=details, **kwargs)


class ArtifactError(ContractError):
    """Compiled artifact missing, malformed or ambiguous"""

    default_code = ErrorCodes.ARTIFACT_INVALID


class ContractSizeError(ContractError):
    """Contract bytecode above the EIP-170 / EIP-3860 limits"""

    default_code = ErrorCodes.CONTRACT_SIZE_EXCEEDED


class TransactionError(DeployError):
    """Transaction signing, submission or execution error"""

    default_code = ErrorCodes.TRANSACTION_FAILED

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        from_address: Optional[str] = None,
        to_address: Optional[str] = None,
        value: Optional[int] = None,
        label: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", None) or {}
        for key, item in (
            ("tx_hash", tx_hash),
            ("from_address", from_address),
            ("to_address", to_address),
            ("value", value),
            ("label", label),
        ):
            if item is not None:
                details[key] = item
        self.tx_hash = tx_hash
        super().__init__(message, details=details, **kwargs)
