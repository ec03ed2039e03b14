"""Sequential deployment and verification of deployment units."""

import logging
import threading
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from .artifacts import ArtifactStore
from .deployer import Deployer
from .exceptions import DeploymentError, VerificationError
from .networks import NetworkClassifier
from .registry import DeploymentRegistry
from .types import (
    DeploymentUnit,
    NetworkProfile,
    RunSummary,
    UnitResult,
    UnitState,
    VerificationOutcome,
)
from .units import select_units
from .verifier import Verifier

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 41


class DeploymentOrchestrator:
    """
    Runs deployment units in declared order against one network.

    Per unit: Pending -> Classifying -> Deploying -> Verifying | Skipped -> Done,
    or Aborted when deployment fails. Explorer verification failures do not
    abort a unit; constructor arguments that do not match the deployment do.
    """

    def __init__(
        self,
        classifier: NetworkClassifier,
        deployer: Deployer,
        verifier: Optional[Verifier],
        registry: DeploymentRegistry,
        artifacts: ArtifactStore,
    ):
        self.classifier = classifier
        self.deployer = deployer
        self.verifier = verifier
        self.registry = registry
        self.artifacts = artifacts

    def run(
        self,
        units: Sequence[DeploymentUnit],
        network_name: str,
        force: bool = False,
        tags: Optional[Iterable[str]] = None,
        fail_fast: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ) -> RunSummary:
        """
        Deploy (and verify where required) every selected unit.

        Args:
            units: Units in declared order
            network_name: Target network
            force: Redeploy even when a matching record exists
            tags: Only run units carrying one of these tags (all units if empty)
            fail_fast: Stop after the first aborted unit
            cancel_event: When set, no further units are started

        Returns:
            RunSummary with one UnitResult per selected unit that was started

        Raises:
            ConfigError: If the network cannot be classified. Raised before
                any deployment happens.
        """
        # Fail on bad network config before touching any unit
        profile = self.classifier.classify(network_name)
        selected = select_units(units, tags)

        logger.info(
            "Running %d deployment unit(s) on %s (ephemeral=%s, confirmations=%d, verify=%s)",
            len(selected), profile.name, profile.is_ephemeral,
            profile.required_confirmations, profile.requires_verification,
        )

        summary = RunSummary(network=profile.name)
        for unit in selected:
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Run cancelled; %s and later units not started", unit.contract_name)
                summary.cancelled = True
                break

            result = UnitResult(unit=unit)
            summary.results.append(result)
            try:
                self._run_unit(result, network_name, force)
            except KeyboardInterrupt:
                result.state = UnitState.ABORTED
                result.error = "cancelled"
                summary.cancelled = True
                logger.warning("Run interrupted during %s", unit.contract_name)
                break

            if result.state is UnitState.ABORTED and fail_fast:
                logger.error("Stopping after failed unit %s", unit.contract_name)
                break

        return summary

    def _run_unit(self, result: UnitResult, network_name: str, force: bool) -> None:
        unit = result.unit

        result.state = UnitState.CLASSIFYING
        profile = self.classifier.classify(network_name)

        result.state = UnitState.DEPLOYING
        previous = None if force else self.registry.get(unit.contract_name, profile.name)
        try:
            record = self.deployer.deploy(unit, profile, force=force)
        except DeploymentError as e:
            self._abort(result, profile, e)
            return
        result.record = record
        result.reused = previous is not None and previous.tx_hash == record.tx_hash

        if not profile.requires_verification or self.verifier is None:
            result.state = UnitState.SKIPPED
            result.verification = VerificationOutcome.SKIPPED
        elif record.verified:
            # Verified in an earlier run
            result.state = UnitState.SKIPPED
            result.verification = VerificationOutcome.VERIFIED
        else:
            result.state = UnitState.VERIFYING
            try:
                self._verify(result, profile)
            except DeploymentError as e:
                # Arguments that do not match the deployed encoding are a hard error
                result.verification = VerificationOutcome.FAILED
                self._abort(result, profile, e)
                return

        logger.info("%s deployed successfully at: %s", unit.contract_name, record.address)
        logger.info(SEPARATOR)
        result.state = UnitState.DONE

    @staticmethod
    def _abort(result: UnitResult, profile: NetworkProfile, error: DeploymentError) -> None:
        result.state = UnitState.ABORTED
        result.error = str(error)
        logger.error("%s aborted on %s: %s", result.unit.contract_name, profile.name, error)

    def _verify(self, result: UnitResult, profile: NetworkProfile) -> None:
        unit = result.unit
        record = result.record
        logger.info("Verifying...")
        artifact = self.artifacts.load(unit.artifact_name)
        try:
            attempt = self.verifier.verify(record, unit.args, artifact)
        except VerificationError as e:
            result.verification = VerificationOutcome.FAILED
            result.error = str(e)
            logger.error("Verification of %s on %s failed: %s", unit.contract_name, profile.name, e)
            return

        result.attempt = attempt
        if attempt.is_verified:
            result.record = replace(record, verified=True)
            self.registry.put(result.record)
            result.verification = VerificationOutcome.VERIFIED
            logger.info(
                "%s verified (%s after %d attempt(s))",
                unit.contract_name, attempt.status.value, attempt.attempt_count,
            )
        else:
            result.verification = VerificationOutcome.FAILED
            result.error = attempt.last_error
            logger.error(
                "Verification of %s failed after %d attempt(s): %s",
                unit.contract_name, attempt.attempt_count, attempt.last_error,
            )


def format_summary(summary: RunSummary) -> str:
    """
    Render a run summary as a human-readable table.

    Args:
        summary: Result of DeploymentOrchestrator.run

    Returns:
        Multi-line string, one line per unit
    """
    lines = [f"Deployment summary for network '{summary.network}':"]
    for result in summary.results:
        line = f"  {result.unit.contract_name:<30} {result.state.value:<8}"
        if result.record is not None:
            line += f" {result.record.address}"
            if result.reused:
                line += " (reused)"
        if result.verification is not None:
            line += f" verification={result.verification.value}"
        if result.error and result.state is UnitState.ABORTED:
            line += f" error={result.error}"
        lines.append(line)
    if summary.cancelled:
        lines.append("  Run cancelled before all units completed")
    return "\n".join(lines)
