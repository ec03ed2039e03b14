"""Idempotent contract deployment."""

import logging
from typing import Optional

from .artifacts import ArtifactStore
from .chain import NetworkClient
from .constants import DEFAULT_CONFIRMATION_TIMEOUT
from .encoding import args_hash, bytecode_hash, encode_constructor_args, to_json_args
from .registry import DeploymentRegistry
from .types import DeploymentRecord, DeploymentUnit, NetworkProfile

logger = logging.getLogger(__name__)


class Deployer:
    """Deploys units through a NetworkClient, reusing matching prior deployments."""

    def __init__(
        self,
        client: NetworkClient,
        registry: DeploymentRegistry,
        artifacts: ArtifactStore,
        account: str,
        timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
    ):
        self.client = client
        self.registry = registry
        self.artifacts = artifacts
        self.account = account
        self.timeout = timeout

    def find_existing(
        self, unit: DeploymentUnit, profile: NetworkProfile
    ) -> Optional[DeploymentRecord]:
        """
        Get the prior deployment of a unit if it matches artifact and arguments.

        Args:
            unit: Deployment unit
            profile: Target network

        Returns:
            Matching DeploymentRecord, or None if the unit must be (re)deployed
        """
        record = self.registry.get(unit.contract_name, profile.name)
        if record is None:
            return None

        artifact = self.artifacts.load(unit.artifact_name)
        expected_args_hash = args_hash(encode_constructor_args(artifact.abi, unit.args))
        if record.constructor_args_hash != expected_args_hash:
            logger.info("%s: constructor arguments changed since last deployment", unit.contract_name)
            return None
        if record.bytecode_hash is not None and record.bytecode_hash != bytecode_hash(artifact.bytecode):
            logger.info("%s: bytecode changed since last deployment", unit.contract_name)
            return None
        return record

    def deploy(
        self, unit: DeploymentUnit, profile: NetworkProfile, force: bool = False
    ) -> DeploymentRecord:
        """
        Deploy a unit, or return its existing deployment.

        Args:
            unit: Deployment unit
            profile: Target network
            force: Deploy even if a matching record exists

        Returns:
            DeploymentRecord (new records have verified=False)

        Raises:
            DeploymentError: On revert, confirmation timeout, insufficient
                funds or missing artifact. Nothing is stored in that case.
        """
        if not force:
            existing = self.find_existing(unit, profile)
            if existing is not None:
                logger.info(
                    "reusing \"%s\" at %s on %s", unit.contract_name, existing.address, profile.name
                )
                return existing

        artifact = self.artifacts.load(unit.artifact_name)
        encoded_args = encode_constructor_args(artifact.abi, unit.args)

        logger.info(
            "deploying \"%s\" (args %s) from %s on %s",
            unit.contract_name, list(unit.args), self.account, profile.name,
        )
        handle = self.client.submit_deployment(artifact.bytecode, artifact.abi, unit.args, self.account)
        confirmed = self.client.wait_confirmations(handle, profile.required_confirmations, self.timeout)

        record = DeploymentRecord(
            contract_name=unit.contract_name,
            constructor_args_hash=args_hash(encoded_args),
            network_name=profile.name,
            address=confirmed.address,
            tx_hash=confirmed.tx_hash,
            block_number=confirmed.block_number,
            verified=False,
            args=to_json_args(unit.args),
            abi=artifact.abi,
            bytecode_hash=bytecode_hash(artifact.bytecode),
            deployer=self.account,
        )
        self.registry.put(record)
        logger.info(
            "deployed \"%s\" at %s in block %s (%s confirmations)",
            unit.contract_name, record.address, record.block_number, profile.required_confirmations,
        )
        return record
