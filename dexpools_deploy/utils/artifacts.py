"""
Compiled contract artifacts.

The compiler writes one JSON file per contract under the artifacts directory,
e.g. ``artifacts/contracts/otc/TradeManager.sol/TradeManager.json``.
Debug files (``*.dbg.json``) and the ``build-info`` directory are not
contract artifacts and are skipped.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from .exceptions import ArtifactError, ErrorCodes

LOG = logging.getLogger(__name__)


@dataclass
class ContractData:
    """Contract bytecode and ABI data"""
    contract_name: str
    abi: List[Dict]
    bytecode: str
    deployed_bytecode: str = "0x"
    source_name: Optional[str] = None
    path: Optional[Path] = field(default=None, compare=False)

    @property
    def fully_qualified_name(self) -> str:
        if self.source_name:
            return f"{self.source_name}:{self.contract_name}"
        return self.contract_name

    @property
    def deployed_size(self) -> int:
        """Deployed (runtime) bytecode size in bytes"""
        return hex_size(self.deployed_bytecode)

    @property
    def initcode_size(self) -> int:
        """Creation bytecode size in bytes"""
        return hex_size(self.bytecode)


def hex_size(data: Optional[str]) -> int:
    """Number of bytes encoded by a hex string, with or without 0x"""
    if not data:
        return 0
    if data.startswith("0x"):
        data = data[2:]
    return len(data) // 2


def _is_artifact_file(path: Path) -> bool:
    return (
        path.suffix == ".json"
        and not path.name.endswith(".dbg.json")
        and "build-info" not in path.parts
    )


def load_artifact(path: Union[str, Path]) -> ContractData:
    """Load a single artifact file"""
    path = Path(path)
    try:
        with open(path, 'r') as f:
            artifact = json.load(f)
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Invalid JSON in artifact {path}: {e}", cause=e)

    for key in ('abi', 'bytecode'):
        if key not in artifact:
            raise ArtifactError(
                f"Missing '{key}' in artifact {path}",
                contract_name=artifact.get('contractName', path.stem)
            )

    return ContractData(
        contract_name=artifact.get('contractName', path.stem),
        abi=artifact['abi'],
        bytecode=artifact['bytecode'],
        deployed_bytecode=artifact.get('deployedBytecode') or "0x",
        source_name=artifact.get('sourceName'),
        path=path
    )


def iter_artifacts(artifacts_dir: Union[str, Path]) -> Iterator[ContractData]:
    """Yield every contract artifact below artifacts_dir, in path order"""
    artifacts_dir = Path(artifacts_dir)
    if not artifacts_dir.is_dir():
        raise ArtifactError(
            f"Artifacts directory not found: {artifacts_dir}",
            code=ErrorCodes.ARTIFACT_NOT_FOUND
        )

    for path in sorted(artifacts_dir.rglob("*.json")):
        if _is_artifact_file(path.relative_to(artifacts_dir)):
            yield load_artifact(path)


def find_artifact(artifacts_dir: Union[str, Path], name: str) -> ContractData:
    """
    Find the artifact for a contract.

    Args:
        artifacts_dir: Artifacts root directory
        name: Contract name, or fully qualified ``source.sol:Contract``

    Raises:
        ArtifactError: If no artifact or more than one artifact matches
    """
    artifacts_dir = Path(artifacts_dir)
    contract_name = name.rsplit(":", 1)[-1]

    if not artifacts_dir.is_dir():
        raise ArtifactError(
            f"Artifacts directory not found: {artifacts_dir}",
            contract_name=name,
            code=ErrorCodes.ARTIFACT_NOT_FOUND
        )

    matches = []
    for path in sorted(artifacts_dir.rglob(f"{contract_name}.json")):
        if not _is_artifact_file(path.relative_to(artifacts_dir)):
            continue
        data = load_artifact(path)
        if name in (data.contract_name, data.fully_qualified_name):
            matches.append(data)

    if not matches:
        raise ArtifactError(
            f"Artifact for contract {name} not found in {artifacts_dir}",
            contract_name=name,
            code=ErrorCodes.ARTIFACT_NOT_FOUND
        )
    if len(matches) > 1:
        candidates = ", ".join(m.fully_qualified_name for m in matches)
        raise ArtifactError(
            f"Multiple artifacts for contract {name}, use a fully qualified name: {candidates}",
            contract_name=name,
            code=ErrorCodes.ARTIFACT_AMBIGUOUS
        )

    LOG.debug(f"Loaded artifact {matches[0].fully_qualified_name} from {matches[0].path}")
    return matches[0]
