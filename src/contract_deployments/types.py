"""Data types and dataclasses for contract-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class DeploymentUnit:
    """One contract-deployment task, declared once and consumed once per run."""

    contract_name: str  # Deployment name, also the registry key
    args: Tuple[Any, ...] = ()  # Ordered constructor arguments
    tags: FrozenSet[str] = frozenset()
    artifact: Optional[str] = None  # Artifact name if different from contract_name
    source: Optional[str] = None  # Unit file this was loaded from

    @property
    def artifact_name(self) -> str:
        return self.artifact or self.contract_name

    def matches_tags(self, tags: Optional[Iterable[str]]) -> bool:
        """
        Check whether this unit is selected by a tag filter.

        Args:
            tags: Requested tags; None or empty selects every unit

        Returns:
            True if any requested tag is carried by this unit
        """
        if not tags:
            return True
        return bool(self.tags & set(tags))


@dataclass(frozen=True)
class NetworkProfile:
    """Deployment policy for a network, resolved once per run."""

    name: str
    is_ephemeral: bool
    required_confirmations: int
    has_verification_credentials: bool
    chain_id: Optional[int] = None
    explorer_url: Optional[str] = None

    @property
    def requires_verification(self) -> bool:
        return not self.is_ephemeral and self.has_verification_credentials


@dataclass
class DeploymentRecord:
    """A confirmed deployment, keyed by (contract_name, network_name)."""

    contract_name: str
    constructor_args_hash: str
    network_name: str
    address: str
    tx_hash: str
    block_number: int
    verified: bool = False

    # Optional fields (hardhat-deploy compatible extras)
    args: List[Any] = field(default_factory=list)
    abi: List[Dict[str, Any]] = field(default_factory=list)
    bytecode_hash: Optional[str] = None
    deployer: Optional[str] = None


class VerificationStatus(Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    ALREADY_VERIFIED = "already-verified"
    FAILED = "failed"


@dataclass
class VerificationAttempt:
    """State of one Verifier invocation. Only logged, never persisted."""

    address: str
    constructor_args: Tuple[Any, ...]
    status: VerificationStatus = VerificationStatus.PENDING
    attempt_count: int = 0
    last_error: Optional[str] = None

    @property
    def is_verified(self) -> bool:
        return self.status in (
            VerificationStatus.SUCCEEDED,
            VerificationStatus.ALREADY_VERIFIED,
        )


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled contract as produced by the compiler toolchain."""

    name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    source_name: Optional[str] = None
    build_info: Optional[Dict[str, Any]] = None  # solcLongVersion + standard JSON input

    @property
    def fully_qualified_name(self) -> str:
        if self.source_name:
            return f"{self.source_name}:{self.name}"
        return self.name


@dataclass(frozen=True)
class ConfirmedDeployment:
    """Result of waiting for a contract-creation transaction to be confirmed."""

    address: str
    tx_hash: str
    block_number: int
    receipt: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExplorerResponse:
    """Normalized answer from a block explorer's verification endpoint."""

    ok: bool
    message: str
    http_status: int = 200


class UnitState(Enum):
    PENDING = "Pending"
    CLASSIFYING = "Classifying"
    DEPLOYING = "Deploying"
    VERIFYING = "Verifying"
    SKIPPED = "Skipped"
    DONE = "Done"
    ABORTED = "Aborted"


class VerificationOutcome(Enum):
    VERIFIED = "verified"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class UnitResult:
    """Terminal state of one deployment unit within a run."""

    unit: DeploymentUnit
    state: UnitState = UnitState.PENDING
    record: Optional[DeploymentRecord] = None
    verification: Optional[VerificationOutcome] = None
    attempt: Optional[VerificationAttempt] = None
    error: Optional[str] = None
    reused: bool = False  # Existing record returned without a transaction


@dataclass
class RunSummary:
    """Aggregated results of one orchestration run."""

    network: str
    results: List[UnitResult] = field(default_factory=list)
    cancelled: bool = False

    @property
    def aborted(self) -> List[UnitResult]:
        return [r for r in self.results if r.state is UnitState.ABORTED]

    @property
    def succeeded(self) -> bool:
        return not self.cancelled and not self.aborted

    @property
    def exit_code(self) -> int:
        if self.cancelled:
            return 130
        return 0 if self.succeeded else 1
