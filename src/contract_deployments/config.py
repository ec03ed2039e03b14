"""Deployment configuration loading for contract-deployments library."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from dotenv import load_dotenv

from .constants import (
    ARTIFACTS_DIRNAME,
    DEFAULT_BLOCK_CONFIRMATIONS,
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_DEVELOPMENT_CHAINS,
    DEFAULT_INITIAL_RETRY_DELAY,
    DEFAULT_MAX_RETRY_DELAY,
    DEFAULT_MAX_TOTAL_VERIFY_WAIT,
    DEFAULT_MAX_VERIFY_ATTEMPTS,
    DEFAULT_NETWORK_PROFILE,
    DEFAULT_RETRY_MULTIPLIER,
    DEPLOYMENTS_DIRNAME,
    DEPLOYER_PRIVATE_KEY_ENV,
    ETHERSCAN_API_KEY_ENV,
    NETWORK_CONFIG,
    UNITS_DIRNAME,
)
from .exceptions import ConfigError
from .paths import get_project_paths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for explorer verification."""

    max_attempts: int = DEFAULT_MAX_VERIFY_ATTEMPTS
    initial_delay: float = DEFAULT_INITIAL_RETRY_DELAY
    multiplier: float = DEFAULT_RETRY_MULTIPLIER
    max_delay: float = DEFAULT_MAX_RETRY_DELAY
    max_total_wait: float = DEFAULT_MAX_TOTAL_VERIFY_WAIT

    def delay(self, attempt: int) -> float:
        """Backoff before retry number `attempt` (1-based)."""
        return min(self.initial_delay * self.multiplier ** (attempt - 1), self.max_delay)


@dataclass(frozen=True)
class NetworkSettings:
    """Static settings of one network, as written in the config file."""

    name: str
    chain_id: Optional[int] = None
    rpc_url: Optional[str] = None
    block_confirmations: int = DEFAULT_BLOCK_CONFIRMATIONS
    ephemeral: bool = False
    explorer_url: Optional[str] = None
    explorer_api_url: Optional[str] = None
    explorer_api_key: Optional[str] = None  # Resolved from the environment
    confirmation_timeout: Optional[float] = None


@dataclass(frozen=True)
class DeploymentConfig:
    """Read-only configuration resolved once at the start of a run."""

    networks: Mapping[str, NetworkSettings] = field(default_factory=dict)
    development_chains: Tuple[str, ...] = tuple(DEFAULT_DEVELOPMENT_CHAINS)
    default_network: Optional[NetworkSettings] = None
    deployer_private_key: Optional[str] = None
    deployer_address: Optional[str] = None
    artifacts_dir: Path = Path(ARTIFACTS_DIRNAME)
    deployments_dir: Path = Path(DEPLOYMENTS_DIRNAME)
    units_dir: Path = Path(UNITS_DIRNAME)
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    retry_policy: RetryPolicy = RetryPolicy()

    def network(self, name: str) -> Optional[NetworkSettings]:
        """Settings for `name`, or None if it has no explicit entry."""
        return self.networks.get(name)

    def timeout_for(self, settings: NetworkSettings) -> float:
        if settings.confirmation_timeout is not None:
            return settings.confirmation_timeout
        return self.confirmation_timeout


def _resolve_env(data: Dict[str, Any], value_key: str, env_key: str,
                 environ: Mapping[str, str]) -> Optional[str]:
    # Literal value wins over an environment variable reference
    if data.get(value_key):
        return data[value_key]
    env_name = data.get(env_key)
    if env_name:
        return environ.get(env_name) or None
    return None


def _parse_network(name: str, data: Dict[str, Any], environ: Mapping[str, str]) -> NetworkSettings:
    known = NETWORK_CONFIG.get(name, {})

    api_key = _resolve_env(data, "api_key", "api_key_env", environ)
    if api_key is None:
        api_key = environ.get(ETHERSCAN_API_KEY_ENV) or None

    try:
        confirmations = int(data.get("block_confirmations", DEFAULT_BLOCK_CONFIRMATIONS))
        timeout = data.get("confirmation_timeout")
        timeout = float(timeout) if timeout is not None else None
        chain_id = data.get("chain_id", known.get("chain_id"))
        chain_id = int(chain_id) if chain_id is not None else None
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid settings for network '{name}': {e}") from e

    if confirmations < 0:
        raise ConfigError(
            f"block_confirmations for network '{name}' must be non-negative, got {confirmations}"
        )

    return NetworkSettings(
        name=name,
        chain_id=chain_id,
        rpc_url=_resolve_env(data, "rpc_url", "rpc_url_env", environ),
        block_confirmations=confirmations,
        ephemeral=bool(data.get("ephemeral", False)),
        explorer_url=data.get("explorer_url", known.get("explorer_url")),
        explorer_api_url=data.get("explorer_api_url", known.get("explorer_api_url")),
        explorer_api_key=api_key,
        confirmation_timeout=timeout,
    )


def _project_dir(data: Dict[str, Any], key: str, base_dir: Path, default: Path) -> Path:
    if key in data:
        return base_dir / data[key]
    return default


def parse_config(
    data: Dict[str, Any],
    base_dir: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DeploymentConfig:
    """
    Build a DeploymentConfig from a parsed config document.

    Args:
        data: Parsed JSON config
        base_dir: Directory relative paths are resolved against
        environ: Environment mapping (defaults to os.environ)

    Returns:
        DeploymentConfig

    Raises:
        ConfigError: If the document is malformed
    """
    if environ is None:
        environ = os.environ
    if base_dir is None:
        base_dir = Path.cwd()
    if not isinstance(data, dict):
        raise ConfigError("Config must be a JSON object")

    networks_data = data.get("networks", {})
    if not isinstance(networks_data, dict):
        raise ConfigError("'networks' must be an object mapping names to settings")

    networks: Dict[str, NetworkSettings] = {}
    default_network = None
    for name, network_data in networks_data.items():
        if not isinstance(network_data, dict):
            raise ConfigError(f"Settings for network '{name}' must be an object")
        settings = _parse_network(name, network_data, environ)
        if name == DEFAULT_NETWORK_PROFILE:
            default_network = settings
        else:
            networks[name] = settings

    deployer = data.get("deployer", {})
    private_key = _resolve_env(deployer, "private_key", "private_key_env", environ)
    if private_key is None and "private_key_env" not in deployer:
        private_key = environ.get(DEPLOYER_PRIVATE_KEY_ENV) or None

    verification = data.get("verification", {})
    try:
        retry_policy = RetryPolicy(
            max_attempts=int(verification.get("max_attempts", DEFAULT_MAX_VERIFY_ATTEMPTS)),
            initial_delay=float(verification.get("initial_delay", DEFAULT_INITIAL_RETRY_DELAY)),
            multiplier=float(verification.get("multiplier", DEFAULT_RETRY_MULTIPLIER)),
            max_delay=float(verification.get("max_delay", DEFAULT_MAX_RETRY_DELAY)),
            max_total_wait=float(
                verification.get("max_total_wait", DEFAULT_MAX_TOTAL_VERIFY_WAIT)
            ),
        )
        confirmation_timeout = float(
            data.get("confirmation_timeout", DEFAULT_CONFIRMATION_TIMEOUT)
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e

    if retry_policy.max_attempts < 1:
        raise ConfigError("verification.max_attempts must be at least 1")

    _, default_artifacts_dir, default_deployments_dir, default_units_dir = get_project_paths(base_dir)
    development_chains: List[str] = data.get("development_chains", DEFAULT_DEVELOPMENT_CHAINS)

    return DeploymentConfig(
        networks=networks,
        development_chains=tuple(development_chains),
        default_network=default_network,
        deployer_private_key=private_key,
        deployer_address=deployer.get("address"),
        artifacts_dir=_project_dir(data, "artifacts_dir", base_dir, default_artifacts_dir),
        deployments_dir=_project_dir(data, "deployments_dir", base_dir, default_deployments_dir),
        units_dir=_project_dir(data, "units_dir", base_dir, default_units_dir),
        confirmation_timeout=confirmation_timeout,
        retry_policy=retry_policy,
    )


def load_config(config_path: Union[Path, str], load_env: bool = True) -> DeploymentConfig:
    """
    Load deployment configuration from a JSON file.

    Secrets stay in the environment; a `.env` file next to the config is
    loaded first when present.

    Args:
        config_path: Path to deploy-config.json
        load_env: Whether to load a .env file before resolving secrets

    Returns:
        DeploymentConfig

    Raises:
        ConfigError: If the file is missing or malformed
    """
    path = Path(config_path)
    if load_env:
        load_dotenv(path.parent / ".env")

    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found at {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e

    config = parse_config(data, base_dir=path.parent.absolute())
    logger.debug("Loaded config from %s with networks %s", path, sorted(config.networks))
    return config
