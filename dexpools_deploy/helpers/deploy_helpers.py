"""
Helpers shared by the deploy scripts.

Both helpers await their transaction until it is mined and log progress, so
a script reads as a plain sequence of steps.
"""

import logging
from typing import Any, List, Optional

from web3.contract import Contract

from ..core.environment import DeployEnvironment
from ..utils.contract_deployer import DeploymentOptions
from ..utils.exceptions import ContractError, ErrorCodes, TransactionError
from ..utils.transaction_builder import TransactionResult

LOG = logging.getLogger(__name__)


async def deploy_contract(
    env: DeployEnvironment,
    name: str,
    constructor_args: Optional[List[Any]] = None,
    label: Optional[str] = None,
    options: Optional[DeploymentOptions] = None
) -> Contract:
    """
    Deploy a contract and return a handle bound to its address.

    Raises:
        ContractError: If the deployment failed or reverted
    """
    args = list(constructor_args or [])
    info = f"{name}:{label}" if label else name
    arg_str = " ".join(f'"{arg}"' for arg in args)
    LOG.info(f"Deploying {info} {arg_str}".rstrip())

    result = await env.deployer.deploy(name, args, options)
    if not result.success:
        raise ContractError(
            f"Deployment of {info} failed: {result.error}",
            contract_name=name,
            details={"transaction_hash": result.transaction_hash}
        )

    LOG.info(f"... Completed! {info} at {result.contract_address}")
    return result.contract


async def send_txn(env: DeployEnvironment, call: Any, label: Optional[str] = None) -> TransactionResult:
    """
    Send a contract function call and wait for it to be mined.

    Args:
        env: Deployment environment
        call: Bound contract function, e.g. ``token.functions.transferOwnership(owner)``
        label: Name used in log lines (default: the function name)

    Raises:
        TransactionError: If the transaction could not be sent or reverted
    """
    label = label or getattr(call, 'fn_name', None) or "transaction"
    LOG.info(f"Sending {label}...")

    tx = await env.tx_builder.build_function_transaction(call)
    result = await env.tx_builder.send_transaction(tx)
    if not result.success:
        raise TransactionError(
            f"{label} failed: {result.error}",
            tx_hash=result.tx_hash,
            to_address=tx.get('to'),
            label=label,
            code=ErrorCodes.TRANSACTION_REVERTED
        )

    LOG.info(f"... Sent! {result.tx_hash}")
    return result
