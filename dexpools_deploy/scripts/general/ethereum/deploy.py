"""Deploy the DexPools token to Ethereum mainnet."""

import sys

from ....core.environment import DeployEnvironment
from ....core.runner import run_script
from ....helpers.deploy_helpers import deploy_contract
from ....utils.logging import setup_logging

NETWORK = "ethereum"


async def main(env: DeployEnvironment) -> None:
    await deploy_contract(env, "DexPoolsToken", [])


if __name__ == "__main__":
    setup_logging()
    sys.exit(run_script(main, NETWORK))
