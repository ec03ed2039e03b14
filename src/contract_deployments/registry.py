"""Durable deployment record store for contract-deployments library."""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .paths import get_record_path
from .types import DeploymentRecord

logger = logging.getLogger(__name__)


def record_to_json(record: DeploymentRecord) -> Dict[str, Any]:
    """
    Serialize a record using hardhat-deploy field names.

    Args:
        record: Deployment record

    Returns:
        Dictionary ready for json.dump
    """
    data: Dict[str, Any] = {
        "contractName": record.contract_name,
        "network": record.network_name,
        "address": record.address,
        "abi": record.abi,
        "transactionHash": record.tx_hash,
        "receipt": {
            "blockNumber": record.block_number,
            "transactionHash": record.tx_hash,
        },
        "args": record.args,
        "argsHash": record.constructor_args_hash,
        "verified": record.verified,
    }

    if record.bytecode_hash is not None:
        data["bytecodeHash"] = record.bytecode_hash
    if record.deployer is not None:
        data["deployer"] = record.deployer

    return data


def record_from_json(data: Dict[str, Any], contract_name: str, network: str) -> DeploymentRecord:
    """
    Parse a record file written by record_to_json.

    Args:
        data: Parsed JSON content
        contract_name: Contract name implied by the file location
        network: Network implied by the file location

    Returns:
        DeploymentRecord
    """
    # Block number lives in the receipt, fall back to top-level
    block_number = (data.get("receipt") or {}).get("blockNumber", data.get("blockNumber"))

    return DeploymentRecord(
        contract_name=data.get("contractName", contract_name),
        constructor_args_hash=data["argsHash"],
        network_name=data.get("network", network),
        address=data["address"],
        tx_hash=data["transactionHash"],
        block_number=block_number,
        verified=bool(data.get("verified", False)),
        args=data.get("args", []),
        abi=data.get("abi", []),
        bytecode_hash=data.get("bytecodeHash"),
        deployer=data.get("deployer"),
    )


class DeploymentRegistry:
    """Deployment records persisted as deployments/{network}/{contract}.json."""

    def __init__(self, deployments_dir: Union[Path, str]):
        self._root = Path(deployments_dir)

    @property
    def root(self) -> Path:
        return self._root

    def get(self, contract_name: str, network_name: str) -> Optional[DeploymentRecord]:
        """
        Look up the live record for a contract on a network.

        Args:
            contract_name: Deployment name
            network_name: Network name

        Returns:
            DeploymentRecord, or None if there is no usable record
        """
        path = get_record_path(self._root, network_name, contract_name)
        try:
            with open(path) as f:
                data = json.load(f)
            return record_from_json(data, contract_name, network_name)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, KeyError, AttributeError, TypeError) as e:
            # A damaged record cannot vouch for a deployment; treat as absent
            logger.warning("Ignoring unreadable deployment record %s: %s", path, e)
            return None

    def put(self, record: DeploymentRecord) -> None:
        """
        Store a record, replacing any previous one for the same key.

        The file is written to a temporary sibling and renamed into place, so
        readers see either the old or the new record, never a partial one.

        Args:
            record: Deployment record
        """
        path = get_record_path(self._root, record.network_name, record.contract_name)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(record_to_json(record), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Saved %s record for %s at %s", record.network_name, record.contract_name, path)

    def records(self, network_name: str) -> List[DeploymentRecord]:
        """
        Get all records stored for a network.

        Args:
            network_name: Network name

        Returns:
            Records sorted by contract name
        """
        network_dir = self._root / network_name
        result = []
        for record_file in sorted(network_dir.glob("*.json")):
            record = self.get(record_file.stem, network_name)
            if record is not None:
                result.append(record)
        return result

    def clear(self, network_name: str) -> None:
        """Delete every record stored for a network."""
        network_dir = self._root / network_name
        if network_dir.exists():
            shutil.rmtree(network_dir)
            logger.info("Removed deployment records for network '%s'", network_name)
