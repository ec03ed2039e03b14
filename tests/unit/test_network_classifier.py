"""Unit tests for network classification."""

import pytest

from contract_deployments.config import DeploymentConfig, NetworkSettings
from contract_deployments.exceptions import ConfigError, NetworkNotFoundError
from contract_deployments.networks import NetworkClassifier


class TestClassify:
    """Test the classify method."""

    def test_configured_ephemeral_network(self, classifier: NetworkClassifier):
        """Test that a network marked ephemeral needs no verification."""
        profile = classifier.classify("local")

        assert profile.is_ephemeral
        assert not profile.requires_verification

    def test_public_network_with_credentials(self, classifier: NetworkClassifier):
        """Test a persistent network with an explorer key."""
        profile = classifier.classify("testnet")

        assert not profile.is_ephemeral
        assert profile.has_verification_credentials
        assert profile.requires_verification
        assert profile.required_confirmations == 2
        assert profile.chain_id == 11155111

    def test_public_network_without_credentials(self, classifier: NetworkClassifier):
        """Test that a missing API key disables verification."""
        profile = classifier.classify("keyless")

        assert not profile.is_ephemeral
        assert not profile.has_verification_credentials
        assert not profile.requires_verification
        assert profile.required_confirmations == 3

    def test_development_chain_without_entry(self, classifier: NetworkClassifier):
        """Test that allow-listed development chains classify without config entries."""
        profile = classifier.classify("hardhat")

        assert profile.is_ephemeral
        assert profile.required_confirmations == 1

    def test_allow_list_wins_over_settings(self):
        """Test that an allow-listed name is ephemeral even with an explorer key."""
        config = DeploymentConfig(
            networks={"localhost": NetworkSettings(name="localhost", explorer_api_key="KEY")},
        )
        profile = NetworkClassifier(config).classify("localhost")

        assert profile.is_ephemeral
        assert not profile.requires_verification

    def test_unknown_network_without_default_raises(self, classifier: NetworkClassifier):
        """Test that unknown networks are a configuration error."""
        with pytest.raises(NetworkNotFoundError) as exc_info:
            classifier.classify("polygon")

        assert "polygon" in str(exc_info.value)

    def test_unknown_network_uses_default_profile(self):
        """Test that a default profile covers unknown networks under their own name."""
        config = DeploymentConfig(
            default_network=NetworkSettings(
                name="default", block_confirmations=5, explorer_api_key="KEY"
            ),
        )
        profile = NetworkClassifier(config).classify("polygon")

        assert profile.name == "polygon"
        assert profile.required_confirmations == 5
        assert profile.requires_verification

    def test_empty_name_raises(self, classifier: NetworkClassifier):
        """Test that an empty network name is rejected."""
        with pytest.raises(ConfigError):
            classifier.classify("")

    def test_classification_is_deterministic(self, classifier: NetworkClassifier):
        """Test that the same name always yields the same profile."""
        assert classifier.classify("testnet") == classifier.classify("testnet")
        assert classifier.classify("testnet") is classifier.classify("testnet")

    def test_independent_classifiers_agree(self, sample_config: DeploymentConfig):
        """Test that classification depends only on the config."""
        first = NetworkClassifier(sample_config).classify("keyless")
        second = NetworkClassifier(sample_config).classify("keyless")
        assert first == second
