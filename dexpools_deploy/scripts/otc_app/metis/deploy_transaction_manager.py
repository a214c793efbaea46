"""Deploy the OTC TransactionManager to Metis Andromeda and hand it over."""

import sys

from ....core.environment import DeployEnvironment
from ....core.runner import run_script
from ....helpers.deploy_helpers import deploy_contract, send_txn
from ....utils.logging import setup_logging

NETWORK = "metis_main"

COMMISSION_ADDRESS = "0xe34668Be1A8D6Db6143C0DcCC564558bC84DF3e3"
DXP_OWNER = "0xEd8c1D2f12751dB7Ee414DA7f046DFee7A3F2C65"


async def main(env: DeployEnvironment) -> None:
    transaction_manager = await deploy_contract(env, "TransactionManager", [])
    await send_txn(env, transaction_manager.functions.setCommissionAddress(COMMISSION_ADDRESS))
    await send_txn(env, transaction_manager.functions.transferOwnership(DXP_OWNER), "transferOwnership")


if __name__ == "__main__":
    setup_logging()
    sys.exit(run_script(main, NETWORK))
