"""Source verification with bounded retry."""

import logging
import time
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from .config import RetryPolicy
from .encoding import args_hash, encode_constructor_args
from .exceptions import ConstructorArgsMismatchError, ExplorerUnavailableError
from .explorer import Explorer, source_metadata
from .types import (
    ContractArtifact,
    DeploymentRecord,
    ExplorerResponse,
    VerificationAttempt,
    VerificationStatus,
)

logger = logging.getLogger(__name__)

ALREADY_VERIFIED_MARKERS = ("already verified",)

# Explorer messages meaning "try again later": rate limits and indexing lag
TRANSIENT_MARKERS = (
    "rate limit",
    "max calls per sec",
    "too many requests",
    "unable to locate contractcode",
    "does not have bytecode",
    "not yet indexed",
    "indexing",
    "pending in queue",
    "try again later",
)


class ResponseKind(Enum):
    SUCCESS = "success"
    ALREADY_VERIFIED = "already-verified"
    TRANSIENT = "transient"
    PERMANENT = "permanent"


def classify_response(response: ExplorerResponse) -> ResponseKind:
    """
    Decide what an explorer answer means for the retry loop.

    Args:
        response: Normalized explorer response

    Returns:
        ResponseKind
    """
    message = response.message.lower()

    if any(marker in message for marker in ALREADY_VERIFIED_MARKERS):
        return ResponseKind.ALREADY_VERIFIED
    if response.ok:
        return ResponseKind.SUCCESS
    if response.http_status == 429 or response.http_status >= 500:
        return ResponseKind.TRANSIENT
    if any(marker in message for marker in TRANSIENT_MARKERS):
        return ResponseKind.TRANSIENT
    return ResponseKind.PERMANENT


class Verifier:
    """Submits deployed contracts for source verification, retrying transient failures."""

    def __init__(
        self,
        explorer: Explorer,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.explorer = explorer
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._clock = clock

    def verify(
        self,
        record: DeploymentRecord,
        constructor_args: Sequence[Any],
        artifact: ContractArtifact,
    ) -> VerificationAttempt:
        """
        Verify a deployed contract.

        Args:
            record: Deployment record of the contract
            constructor_args: The arguments the contract was deployed with
            artifact: Compiled artifact the contract was deployed from

        Returns:
            VerificationAttempt in a terminal state (SUCCEEDED, ALREADY_VERIFIED or FAILED)

        Raises:
            ConstructorArgsMismatchError: If the arguments do not encode to the
                bytes the contract was deployed with
        """
        attempt = VerificationAttempt(address=record.address, constructor_args=tuple(constructor_args))

        encoded = encode_constructor_args(artifact.abi, constructor_args)
        if args_hash(encoded) != record.constructor_args_hash:
            raise ConstructorArgsMismatchError(
                f"Constructor arguments for {record.contract_name} do not match the "
                f"deployed encoding ({args_hash(encoded)} != {record.constructor_args_hash})"
            )

        metadata = source_metadata(artifact)
        # Budget covers backoff and the explorer's own status polling
        started = self._clock()

        while attempt.attempt_count < self.policy.max_attempts:
            attempt.attempt_count += 1
            try:
                response = self.explorer.submit_verification(
                    record.address,
                    metadata,
                    encoded.hex(),
                    timeout=max(self.policy.max_total_wait - (self._clock() - started), 0.0),
                )
            except ExplorerUnavailableError as e:
                response = None
                kind = ResponseKind.TRANSIENT
                attempt.last_error = str(e)
            else:
                kind = classify_response(response)

            if kind is ResponseKind.SUCCESS:
                attempt.status = VerificationStatus.SUCCEEDED
                attempt.last_error = None
                return attempt
            if kind is ResponseKind.ALREADY_VERIFIED:
                attempt.status = VerificationStatus.ALREADY_VERIFIED
                attempt.last_error = None
                return attempt

            if response is not None:
                attempt.last_error = response.message
            if kind is ResponseKind.PERMANENT:
                logger.error("Verification of %s rejected: %s", record.address, attempt.last_error)
                break

            if attempt.attempt_count >= self.policy.max_attempts:
                break
            delay = self.policy.delay(attempt.attempt_count)
            if self._clock() - started + delay > self.policy.max_total_wait:
                logger.warning(
                    "Verification of %s exceeded its %.0fs wait budget", record.address,
                    self.policy.max_total_wait,
                )
                break

            logger.warning(
                "Verification attempt %d/%d for %s failed (%s), retrying in %.1fs",
                attempt.attempt_count, self.policy.max_attempts, record.address,
                attempt.last_error, delay,
            )
            self._sleep(delay)

        attempt.status = VerificationStatus.FAILED
        return attempt
