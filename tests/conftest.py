"""Shared pytest fixtures for contract-deployments tests."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pytest
from web3 import Web3

from contract_deployments.artifacts import ArtifactStore
from contract_deployments.chain import TxHandle
from contract_deployments.config import DeploymentConfig, NetworkSettings, RetryPolicy
from contract_deployments.deployer import Deployer
from contract_deployments.networks import NetworkClassifier
from contract_deployments.registry import DeploymentRegistry
from contract_deployments.types import ConfirmedDeployment, ExplorerResponse, NetworkProfile

DEPLOYER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class FakeNetworkClient:
    """In-memory NetworkClient that confirms every transaction unless told otherwise."""

    def __init__(self):
        self.submissions: List[Dict[str, Any]] = []
        self.waits: List[tuple] = []
        # Exceptions raised by successive wait_confirmations calls; None means success
        self.failures: List[Optional[Exception]] = []

    def default_account(self) -> str:
        return DEPLOYER_ADDRESS

    def submit_deployment(
        self, bytecode: str, abi: List[Dict[str, Any]], args: Sequence[Any], from_account: str
    ) -> TxHandle:
        self.submissions.append(
            {"bytecode": bytecode, "abi": abi, "args": tuple(args), "from": from_account}
        )
        return TxHandle(tx_hash=f"0x{len(self.submissions):064x}", from_account=from_account)

    def wait_confirmations(
        self, tx_handle: TxHandle, confirmations: int, timeout: float
    ) -> ConfirmedDeployment:
        self.waits.append((tx_handle, confirmations, timeout))
        if self.failures:
            failure = self.failures.pop(0)
            if failure is not None:
                raise failure

        n = int(tx_handle.tx_hash, 16)
        return ConfirmedDeployment(
            address=Web3.to_checksum_address(f"0x{0xC0FFEE00 + n:040x}"),
            tx_hash=tx_handle.tx_hash,
            block_number=1000 + n,
            receipt={"status": 1},
        )


class FakeExplorer:
    """Explorer replaying scripted responses; the last one repeats once the script runs out."""

    def __init__(self, script: Optional[List[Union[ExplorerResponse, Exception]]] = None):
        self.script = list(script or [ExplorerResponse(ok=True, message="Pass - Verified")])
        self.calls: List[Dict[str, Any]] = []

    def submit_verification(
        self,
        address: str,
        source_metadata: Dict[str, Any],
        constructor_args_encoded: str,
        timeout: Optional[float] = None,
    ) -> ExplorerResponse:
        self.calls.append(
            {
                "address": address,
                "source_metadata": source_metadata,
                "constructor_args_encoded": constructor_args_encoded,
                "timeout": timeout,
            }
        )
        index = min(len(self.calls), len(self.script)) - 1
        outcome = self.script[index]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class SleepRecorder:
    """Replacement for time.sleep that records requested delays.

    `clock` is the matching monotonic clock: it advances only by recorded sleeps.
    """

    def __init__(self):
        self.delays: List[float] = []
        self.now = 0.0

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        self.now += seconds

    def clock(self) -> float:
        return self.now


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the directory of sample hardhat artifacts."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def artifact_store(artifacts_dir: Path) -> ArtifactStore:
    """ArtifactStore over the sample artifacts."""
    return ArtifactStore(artifacts_dir)


@pytest.fixture
def registry(tmp_path: Path) -> DeploymentRegistry:
    """Empty deployment registry in a temporary directory."""
    return DeploymentRegistry(tmp_path / "deployments")


@pytest.fixture
def fake_client() -> FakeNetworkClient:
    return FakeNetworkClient()


@pytest.fixture
def fake_explorer() -> FakeExplorer:
    return FakeExplorer()


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def sample_config() -> DeploymentConfig:
    """Config with one local network, one testnet with an explorer key and one without."""
    return DeploymentConfig(
        networks={
            "local": NetworkSettings(name="local", ephemeral=True),
            "testnet": NetworkSettings(
                name="testnet",
                chain_id=11155111,
                block_confirmations=2,
                explorer_api_url="https://api-sepolia.etherscan.io/api",
                explorer_api_key="TESTKEY",
            ),
            "keyless": NetworkSettings(name="keyless", block_confirmations=3),
        },
        development_chains=("hardhat", "localhost"),
        retry_policy=RetryPolicy(max_attempts=3, initial_delay=1.0, max_total_wait=60.0),
    )


@pytest.fixture
def classifier(sample_config: DeploymentConfig) -> NetworkClassifier:
    return NetworkClassifier(sample_config)


@pytest.fixture
def local_profile(classifier: NetworkClassifier) -> NetworkProfile:
    return classifier.classify("local")


@pytest.fixture
def testnet_profile(classifier: NetworkClassifier) -> NetworkProfile:
    return classifier.classify("testnet")


@pytest.fixture
def deployer(
    fake_client: FakeNetworkClient, registry: DeploymentRegistry, artifact_store: ArtifactStore
) -> Deployer:
    return Deployer(fake_client, registry, artifact_store, DEPLOYER_ADDRESS, timeout=30)


@pytest.fixture
def make_explorer():
    """Factory for FakeExplorer instances with a scripted sequence of answers."""
    return FakeExplorer


@pytest.fixture
def deployer_address() -> str:
    return DEPLOYER_ADDRESS
