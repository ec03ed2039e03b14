"""Network classification for contract-deployments library."""

from dataclasses import replace
from typing import Dict

from .config import DeploymentConfig, NetworkSettings
from .exceptions import ConfigError, NetworkNotFoundError
from .types import NetworkProfile


class NetworkClassifier:
    """Answers how a network must be treated: ephemeral or persistent, how many confirmations."""

    def __init__(self, config: DeploymentConfig):
        self._config = config
        self._profiles: Dict[str, NetworkProfile] = {}

    def settings(self, network_name: str) -> NetworkSettings:
        """
        Get the static settings that apply to a network.

        Development chains without an explicit entry get local defaults.

        Args:
            network_name: Network identifier

        Returns:
            NetworkSettings for the network

        Raises:
            ConfigError: If network_name is empty
            NetworkNotFoundError: If no profile matches and no default exists
        """
        if not network_name:
            raise ConfigError("Network name must be a non-empty string")

        settings = self._config.network(network_name)
        if settings is not None:
            return settings

        if network_name in self._config.development_chains:
            return NetworkSettings(name=network_name, ephemeral=True)

        if self._config.default_network is not None:
            return replace(self._config.default_network, name=network_name)

        raise NetworkNotFoundError(
            f"Network '{network_name}' not found in config and no default profile exists"
        )

    def classify(self, network_name: str) -> NetworkProfile:
        """
        Resolve the deployment policy for a network.

        Args:
            network_name: Network identifier

        Returns:
            NetworkProfile (same object for the same name within a run)

        Raises:
            ConfigError: If network_name is empty
            NetworkNotFoundError: If no profile matches and no default exists
        """
        if network_name in self._profiles:
            return self._profiles[network_name]

        settings = self.settings(network_name)
        profile = NetworkProfile(
            name=network_name,
            is_ephemeral=settings.ephemeral or network_name in self._config.development_chains,
            required_confirmations=settings.block_confirmations,
            has_verification_credentials=bool(settings.explorer_api_key),
            chain_id=settings.chain_id,
            explorer_url=settings.explorer_url,
        )
        self._profiles[network_name] = profile
        return profile
