"""Custom exception classes for contract-deployments library."""


class ContractDeploymentsError(Exception):
    """Base exception for all contract-deployments errors."""

    pass


class ConfigError(ContractDeploymentsError, ValueError):
    """Raised when configuration is missing or invalid. Aborts the whole run."""

    pass


class NetworkNotFoundError(ConfigError):
    """Raised when a network has no profile and no default profile exists."""

    pass


class UnitFileError(ConfigError):
    """Raised when a deployment unit file cannot be parsed."""

    pass


class DeploymentError(ContractDeploymentsError):
    """Base exception for per-unit fatal deployment failures."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a compiled contract artifact cannot be found."""

    pass


class TransactionRevertedError(DeploymentError):
    """Raised when the contract-creation transaction reverts."""

    pass


class ConfirmationTimeoutError(DeploymentError, TimeoutError):
    """Raised when required confirmations are not observed before the timeout."""

    pass


class InsufficientFundsError(DeploymentError):
    """Raised when the deployer account cannot pay for the deployment."""

    pass


class ConstructorArgsMismatchError(DeploymentError, ValueError):
    """Raised when verification arguments do not encode to the deployed ones."""

    pass


class VerificationError(ContractDeploymentsError):
    """Base exception for non-fatal verification failures."""

    pass


class ExplorerUnavailableError(VerificationError):
    """Raised when the explorer service cannot be reached."""

    pass
