"""
Top-level boundary for deploy scripts.

run_script() is the only place deploy errors are caught: whatever a script
raises is logged once and turned into exit code 1. Steps that completed
before the failure are not rolled back.
"""

import asyncio
import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import Awaitable, Callable, Optional, Union

from ..scripts import SCRIPTS
from ..utils.config_manager import DeployConfiguration, load_deploy_config
from ..utils.exceptions import ConfigurationError
from .environment import DeployEnvironment

LOG = logging.getLogger(__name__)

SCRIPTS_PACKAGE = "dexpools_deploy.scripts"

ScriptMain = Callable[[DeployEnvironment], Awaitable[None]]


async def _run(
    main: ScriptMain,
    network: Optional[str],
    config: Optional[DeployConfiguration],
    config_path: Optional[Union[str, Path]]
) -> None:
    if config is None:
        config = load_deploy_config(config_path)
    env = DeployEnvironment(config, network)
    await env.connect()
    await main(env)


def run_script(
    main: ScriptMain,
    network: Optional[str] = None,
    config: Optional[DeployConfiguration] = None,
    config_path: Optional[Union[str, Path]] = None
) -> int:
    """
    Run a deploy script's main coroutine against a network.

    Returns:
        Process exit code: 0 on success, 1 on any error
    """
    try:
        asyncio.run(_run(main, network, config, config_path))
    except Exception as e:
        LOG.error(f"Deploy script failed: {e}", exc_info=True)
        return 1
    return 0


def load_script(name: str) -> ModuleType:
    """Import a registered deploy script by name"""
    if name not in SCRIPTS:
        known = ", ".join(sorted(SCRIPTS))
        raise ConfigurationError(f"Unknown deploy script '{name}' (available: {known})")
    return importlib.import_module(f"{SCRIPTS_PACKAGE}.{name}")


def run_registered_script(
    name: str,
    network: Optional[str] = None,
    config_path: Optional[Union[str, Path]] = None
) -> int:
    """Run a registered script, on its own target network unless one is given"""
    try:
        module = load_script(name)
    except ConfigurationError as e:
        LOG.error(str(e))
        return 1
    return run_script(module.main, network or module.NETWORK, config_path=config_path)

