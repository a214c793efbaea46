"""
ABI exporter

Copies the ABI of every compiled contract into a stable directory so that
front ends and off-chain services can consume it without the rest of the
compiler output.
"""

import json
import logging
import re
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Union

from .artifacts import ContractData, iter_artifacts
from .config_manager import AbiExporterSettings
from .exceptions import ArtifactError, ErrorCodes

LOG = logging.getLogger(__name__)


def _selected(data: ContractData, only: List[str], exclude: List[str]) -> bool:
    name = data.fully_qualified_name
    if only and not any(re.search(pattern, name) for pattern in only):
        return False
    if any(re.search(pattern, name) for pattern in exclude):
        return False
    return True


def _clear_directory(directory: Path) -> None:
    for child in directory.iterdir():
        if child.is_dir():
            shutil.rmtree(child)
        else:
            child.unlink()


def export_abis(
    artifacts_dir: Union[str, Path],
    settings: Optional[AbiExporterSettings] = None,
    root: Optional[Union[str, Path]] = None
) -> List[Path]:
    """
    Export contract ABIs as JSON files.

    Args:
        artifacts_dir: Directory holding compiled artifacts
        settings: Exporter settings (output path, clear, flat, only/except filters)
        root: Base directory a relative output path resolves against

    Returns:
        Paths of the written ABI files

    Raises:
        ArtifactError: If flat output would write two ABIs to the same file
    """
    settings = settings or AbiExporterSettings()
    out_dir = Path(settings.path)
    if root is not None and not out_dir.is_absolute():
        out_dir = Path(root) / out_dir

    outputs: Dict[Path, ContractData] = {}
    for data in iter_artifacts(artifacts_dir):
        if not data.abi or not _selected(data, settings.only, settings.exclude):
            continue

        if settings.flat or not data.source_name:
            destination = out_dir / f"{data.contract_name}.json"
        else:
            destination = out_dir / data.source_name / f"{data.contract_name}.json"

        if destination in outputs:
            raise ArtifactError(
                f"ABI export conflict: {outputs[destination].fully_qualified_name} "
                f"and {data.fully_qualified_name} both map to {destination.name}",
                contract_name=data.contract_name,
                code=ErrorCodes.ABI_EXPORT_CONFLICT
            )
        outputs[destination] = data

    if settings.clear and out_dir.exists():
        _clear_directory(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    for destination, data in outputs.items():
        destination.parent.mkdir(parents=True, exist_ok=True)
        with open(destination, 'w') as f:
            json.dump(data.abi, f, indent=2)
            f.write("\n")

    LOG.info(f"Exported {len(outputs)} ABI file(s) to {out_dir}")
    return list(outputs)
