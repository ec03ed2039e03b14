"""Compiled artifact loading for contract-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .exceptions import ArtifactNotFoundError
from .types import ContractArtifact


def parse_hardhat_artifact(file_path: Path) -> ContractArtifact:
    """
    Parse a hardhat compiler artifact.

    Args:
        file_path: Path to {ContractName}.json artifact

    Returns:
        ContractArtifact, with build info attached when the sibling
        {ContractName}.dbg.json points to a readable build-info file

    Raises:
        ArtifactNotFoundError: If the artifact lacks abi or bytecode
    """
    with open(file_path) as f:
        data = json.load(f)

    if "abi" not in data or not data.get("bytecode") or data["bytecode"] == "0x":
        raise ArtifactNotFoundError(
            f"Artifact {file_path} has no deployable bytecode (abstract contract or interface?)"
        )

    return ContractArtifact(
        name=data.get("contractName", file_path.stem),
        abi=data["abi"],
        bytecode=data["bytecode"],
        source_name=data.get("sourceName"),
        build_info=_load_build_info(file_path),
    )


def _load_build_info(artifact_path: Path) -> Optional[Dict[str, Any]]:
    dbg_path = artifact_path.with_name(f"{artifact_path.stem}.dbg.json")
    try:
        with open(dbg_path) as f:
            build_info_ref = json.load(f)["buildInfo"]
        with open((dbg_path.parent / build_info_ref).resolve()) as f:
            build_info = json.load(f)
    except (FileNotFoundError, KeyError, json.JSONDecodeError):
        return None

    return {
        "solcLongVersion": build_info.get("solcLongVersion"),
        "input": build_info.get("input"),
    }


class ArtifactStore:
    """Resolves contract names to compiled artifacts under an artifacts directory."""

    def __init__(self, artifacts_dir: Union[Path, str]):
        self._artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, ContractArtifact] = {}

    def find(self, name: str) -> Optional[Path]:
        """
        Locate the artifact file for a contract.

        Args:
            name: Contract name

        Returns:
            Path to the artifact, or None if no file matches
        """
        # Hardhat nests artifacts by source path
        for candidate in sorted(self._artifacts_dir.rglob(f"{name}.json")):
            if "build-info" in candidate.parts or candidate.name.endswith(".dbg.json"):
                continue
            return candidate
        return None

    def load(self, name: str) -> ContractArtifact:
        """
        Load a compiled artifact by contract name.

        Args:
            name: Contract name

        Returns:
            ContractArtifact

        Raises:
            ArtifactNotFoundError: If no usable artifact exists for the name
        """
        if name in self._cache:
            return self._cache[name]

        path = self.find(name)
        if path is None:
            raise ArtifactNotFoundError(
                f"Artifact for contract '{name}' not found under {self._artifacts_dir}"
            )

        artifact = parse_hardhat_artifact(path)
        self._cache[name] = artifact
        return artifact
