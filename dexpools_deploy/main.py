#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

from .core.runner import run_registered_script
from .scripts import SCRIPTS
from .utils.abi_exporter import export_abis
from .utils.config_manager import load_deploy_config
from .utils.contract_sizer import check_contract_sizes
from .utils.exceptions import DeployError
from .utils.logging import setup_logging

LOG = logging.getLogger(__name__)


def cmd_run(args) -> int:
    return run_registered_script(args.script, network=args.network, config_path=args.config)


def cmd_list(args) -> int:
    for name, network in sorted(SCRIPTS.items()):
        print(f"{name:<45} {network}")
    return 0


def cmd_networks(args) -> int:
    config = load_deploy_config(args.config)
    for name, network in config.networks.items():
        marker = "*" if name == config.default_network else " "
        key_state = "key set" if network.has_credential else f"missing {network.accounts_env}"
        print(f"{marker} {name:<12} chain {network.chain_id:<6} {network.url}  ({key_state})")
    return 0


def cmd_build(args) -> int:
    """Post-compile step: export ABIs, then report contract sizes"""
    config = load_deploy_config(args.config)
    root = Path.cwd()
    artifacts_dir = root / config.artifacts_dir

    export_abis(artifacts_dir, config.abi_exporter, root=root)

    sizer = config.contract_sizer
    if sizer.run_on_compile:
        check_contract_sizes(
            artifacts_dir,
            alpha_sort=sizer.alpha_sort,
            disambiguate_paths=sizer.disambiguate_paths,
            strict=sizer.strict
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DexPools contract deployment toolkit")
    parser.add_argument("--config", default=None,
                        help="Path to a deployment configuration file (default: packaged config)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")
    parser.add_argument("--log-file", default=None,
                        help="Path to log file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a deploy script")
    run_parser.add_argument("script", choices=sorted(SCRIPTS), help="Registered script name")
    run_parser.add_argument("--network", default=None,
                            help="Override the script's target network")
    run_parser.set_defaults(func=cmd_run)

    list_parser = subparsers.add_parser("list", help="List deploy scripts")
    list_parser.set_defaults(func=cmd_list)

    networks_parser = subparsers.add_parser("networks", help="List configured networks")
    networks_parser.set_defaults(func=cmd_networks)

    build_cmd = subparsers.add_parser("build", help="Export ABIs and check contract sizes")
    build_cmd.set_defaults(func=cmd_build)

    return parser


def main(argv=None) -> int:
    """Main execution flow"""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        return args.func(args)
    except DeployError as e:
        LOG.error(str(e))
        return 1
    except Exception as e:
        LOG.error(f"Command '{args.command}' failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
