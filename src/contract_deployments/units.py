"""Deployment unit files for contract-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .exceptions import UnitFileError
from .types import DeploymentUnit


def parse_unit(data: Dict[str, Any], source: Optional[str] = None) -> DeploymentUnit:
    """
    Build a DeploymentUnit from its JSON form.

    Args:
        data: {"contract": str, "args": list, "tags": list, "artifact": optional str}
        source: Where the data came from, for error messages

    Returns:
        DeploymentUnit

    Raises:
        UnitFileError: If required fields are missing or mistyped
    """
    where = f" in {source}" if source else ""

    contract = data.get("contract")
    if not isinstance(contract, str) or not contract:
        raise UnitFileError(f"Missing contract name{where}")

    args = data.get("args", [])
    if not isinstance(args, list):
        raise UnitFileError(f"'args' must be a list{where}")

    tags = data.get("tags", [])
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise UnitFileError(f"'tags' must be a list of strings{where}")

    return DeploymentUnit(
        contract_name=contract,
        args=tuple(args),
        tags=frozenset(tags),
        artifact=data.get("artifact"),
        source=source,
    )


def load_units(units_dir: Union[Path, str]) -> List[DeploymentUnit]:
    """
    Load every unit file in a directory.

    Files run in filename order, so prefix them (01_token.json, 02_vault.json)
    to control deployment order.

    Args:
        units_dir: Directory containing *.json unit files

    Returns:
        Units in declared order

    Raises:
        UnitFileError: If the directory is missing or a file is malformed
    """
    directory = Path(units_dir)
    if not directory.is_dir():
        raise UnitFileError(f"Deployment units directory not found at {directory}")

    units = []
    for unit_file in sorted(directory.glob("*.json")):
        try:
            with open(unit_file) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise UnitFileError(f"Unit file {unit_file} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise UnitFileError(f"Unit file {unit_file} must contain a JSON object")
        units.append(parse_unit(data, source=unit_file.name))

    return units


def select_units(units: Iterable[DeploymentUnit], tags: Optional[Iterable[str]]) -> List[DeploymentUnit]:
    """
    Filter units by tag, keeping declared order.

    Args:
        units: Declared units
        tags: Requested tags; None or empty selects all units

    Returns:
        Units carrying at least one requested tag
    """
    tag_set = set(tags) if tags else None
    return [u for u in units if u.matches_tags(tag_set)]
