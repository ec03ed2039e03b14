"""Command-line entry point: contract-deploy."""

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from .artifacts import ArtifactStore
from .chain import Web3NetworkClient
from .config import DeploymentConfig, load_config
from .deployer import Deployer
from .exceptions import ConfigError, DeploymentError
from .explorer import EtherscanExplorer
from .networks import NetworkClassifier
from .orchestrator import DeploymentOrchestrator, format_summary
from .paths import get_config_path
from .registry import DeploymentRegistry
from .units import load_units
from .verifier import Verifier

logger = logging.getLogger(__name__)

LOCAL_RPC_URL = "http://127.0.0.1:8545"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="contract-deploy",
        description="Deploy contracts to a network and verify them on its block explorer.",
    )
    parser.add_argument("--network", required=True, help="Target network name from the config")
    parser.add_argument(
        "--tags",
        default="",
        help="Comma-separated tags; only units carrying one of them run (default: all units)",
    )
    parser.add_argument("--force", action="store_true", help="Redeploy even if a matching deployment exists")
    parser.add_argument("--reset", action="store_true", help="Delete stored deployments for the network first")
    parser.add_argument("--fail-fast", action="store_true", help="Stop after the first failed unit")
    parser.add_argument("--config", type=Path, default=None, help="Path to deploy-config.json")
    parser.add_argument("--units-dir", type=Path, default=None, help="Directory of deployment unit files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_orchestrator(
    config: DeploymentConfig, classifier: NetworkClassifier, network_name: str
) -> DeploymentOrchestrator:
    """
    Wire up the collaborators for one network.

    Args:
        config: Loaded configuration
        classifier: Classifier built from the same config
        network_name: Target network

    Returns:
        DeploymentOrchestrator ready to run

    Raises:
        ConfigError: If the network lacks an RPC endpoint or explorer API URL
        DeploymentError: If the node cannot be reached
    """
    settings = classifier.settings(network_name)
    profile = classifier.classify(network_name)

    rpc_url = settings.rpc_url
    if rpc_url is None:
        if not profile.is_ephemeral:
            raise ConfigError(f"No rpc_url configured for network '{network_name}'")
        rpc_url = LOCAL_RPC_URL

    client = Web3NetworkClient.from_rpc_url(rpc_url, private_key=config.deployer_private_key)
    account = config.deployer_address or client.default_account()

    registry = DeploymentRegistry(config.deployments_dir)
    artifacts = ArtifactStore(config.artifacts_dir)
    deployer = Deployer(client, registry, artifacts, account, timeout=config.timeout_for(settings))

    verifier = None
    if profile.requires_verification:
        if not settings.explorer_api_url:
            raise ConfigError(f"No explorer_api_url configured for network '{network_name}'")
        explorer = EtherscanExplorer(
            settings.explorer_api_url, settings.explorer_api_key, chain_id=settings.chain_id
        )
        verifier = Verifier(explorer, config.retry_policy)

    return DeploymentOrchestrator(classifier, deployer, verifier, registry, artifacts)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

    config_path = args.config or get_config_path()
    tags = [t.strip() for t in args.tags.split(",") if t.strip()]

    try:
        config = load_config(config_path)
        units = load_units(args.units_dir or config.units_dir)
        classifier = NetworkClassifier(config)
        orchestrator = build_orchestrator(config, classifier, args.network)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        return 2
    except DeploymentError as e:
        logger.error("Cannot start deployment: %s", e)
        return 1

    if args.reset:
        orchestrator.registry.clear(args.network)

    # SIGTERM stops the run between units; SIGINT interrupts the current one
    cancel_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: cancel_event.set())

    summary = orchestrator.run(
        units,
        args.network,
        force=args.force,
        tags=tags,
        fail_fast=args.fail_fast,
        cancel_event=cancel_event,
    )
    print(format_summary(summary))
    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main())
