"""
Contract size report.

Measures the runtime and creation bytecode of every compiled contract and
compares them with the EIP-170 (24 KiB runtime) and EIP-3860 (48 KiB
initcode) limits.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from .artifacts import iter_artifacts
from .exceptions import ContractSizeError

LOG = logging.getLogger(__name__)

DEPLOYED_SIZE_LIMIT = 24576
INITCODE_SIZE_LIMIT = 2 * DEPLOYED_SIZE_LIMIT


@dataclass(frozen=True)
class ContractSize:
    name: str
    deployed_size: int
    initcode_size: int

    @property
    def deployed_kib(self) -> float:
        return self.deployed_size / 1024

    @property
    def initcode_kib(self) -> float:
        return self.initcode_size / 1024

    @property
    def oversized(self) -> bool:
        return (
            self.deployed_size > DEPLOYED_SIZE_LIMIT
            or self.initcode_size > INITCODE_SIZE_LIMIT
        )


def measure_contracts(
    artifacts_dir: Union[str, Path],
    alpha_sort: bool = False,
    disambiguate_paths: bool = False
) -> List[ContractSize]:
    """
    Measure every deployable contract in artifacts_dir.

    Interfaces and abstract contracts (empty runtime bytecode) are skipped.
    Rows are sorted by name when alpha_sort is set, otherwise by runtime
    size, largest last.
    """
    sizes = []
    for data in iter_artifacts(artifacts_dir):
        if not data.deployed_size:
            continue
        name = data.fully_qualified_name if disambiguate_paths else data.contract_name
        sizes.append(ContractSize(name, data.deployed_size, data.initcode_size))

    if alpha_sort:
        sizes.sort(key=lambda s: s.name)
    else:
        sizes.sort(key=lambda s: s.deployed_size)
    return sizes


def format_size_table(sizes: List[ContractSize]) -> str:
    """Render sizes as a fixed-width table"""
    width = max([len("Contract Name")] + [len(s.name) for s in sizes])
    lines = [
        f"{'Contract Name':<{width}} | Deployed Size (KiB) | Initcode Size (KiB)",
        f"{'-' * width}-|---------------------|--------------------",
    ]
    for s in sizes:
        marker = " !" if s.oversized else ""
        lines.append(f"{s.name:<{width}} | {s.deployed_kib:>19.3f} | {s.initcode_kib:>18.3f}{marker}")
    return "\n".join(lines)


def check_contract_sizes(
    artifacts_dir: Union[str, Path],
    alpha_sort: bool = False,
    disambiguate_paths: bool = False,
    strict: bool = False
) -> List[ContractSize]:
    """
    Log the size table and flag contracts above the limits.

    Raises:
        ContractSizeError: If strict and any contract is oversized
    """
    sizes = measure_contracts(artifacts_dir, alpha_sort, disambiguate_paths)
    LOG.info("Contract sizes:\n" + format_size_table(sizes))

    oversized = [s for s in sizes if s.oversized]
    for s in oversized:
        LOG.warning(
            f"{s.name} exceeds the size limit "
            f"(runtime {s.deployed_size}/{DEPLOYED_SIZE_LIMIT} bytes, "
            f"initcode {s.initcode_size}/{INITCODE_SIZE_LIMIT} bytes)"
        )

    if strict and oversized:
        names = ", ".join(s.name for s in oversized)
        raise ContractSizeError(
            f"Contracts exceed the size limit: {names}",
            details={"contracts": [s.name for s in oversized]}
        )

    return sizes
