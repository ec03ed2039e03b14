"""
contract-deployments: idempotent smart contract deployment and explorer verification
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import ArtifactStore
from .config import DeploymentConfig, NetworkSettings, RetryPolicy, load_config
from .deployer import Deployer
from .exceptions import (
    ArtifactNotFoundError,
    ConfigError,
    ConfirmationTimeoutError,
    ConstructorArgsMismatchError,
    ContractDeploymentsError,
    DeploymentError,
    ExplorerUnavailableError,
    InsufficientFundsError,
    NetworkNotFoundError,
    TransactionRevertedError,
    UnitFileError,
    VerificationError,
)
from .networks import NetworkClassifier
from .orchestrator import DeploymentOrchestrator
from .registry import DeploymentRegistry
from .types import (
    DeploymentRecord,
    DeploymentUnit,
    NetworkProfile,
    RunSummary,
    UnitState,
    VerificationAttempt,
    VerificationStatus,
)
from .verifier import Verifier

try:
    __version__ = version("contract-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "ArtifactStore",
    "DeploymentConfig",
    "NetworkSettings",
    "RetryPolicy",
    "load_config",
    "Deployer",
    "NetworkClassifier",
    "DeploymentOrchestrator",
    "DeploymentRegistry",
    "Verifier",
    "DeploymentRecord",
    "DeploymentUnit",
    "NetworkProfile",
    "RunSummary",
    "UnitState",
    "VerificationAttempt",
    "VerificationStatus",
    "ContractDeploymentsError",
    "ConfigError",
    "NetworkNotFoundError",
    "UnitFileError",
    "DeploymentError",
    "ArtifactNotFoundError",
    "TransactionRevertedError",
    "ConfirmationTimeoutError",
    "InsufficientFundsError",
    "ConstructorArgsMismatchError",
    "VerificationError",
    "ExplorerUnavailableError",
]
