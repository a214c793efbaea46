"""Deploy the DexPools token to Metis Andromeda."""

import sys

from ....core.environment import DeployEnvironment
from ....core.runner import run_script
from ....helpers.deploy_helpers import deploy_contract
from ....utils.logging import setup_logging

NETWORK = "metis_main"

TRUSTED_FORWARDER = "0xaD1628acd4a895efb1Ad94CC4471B3917CF90D91"


async def main(env: DeployEnvironment) -> None:
    await deploy_contract(env, "DexpoolsToken", [TRUSTED_FORWARDER])


if __name__ == "__main__":
    setup_logging()
    sys.exit(run_script(main, NETWORK))
