"""Unit tests for compiled artifact loading."""

import json
from pathlib import Path

import pytest

from contract_deployments.artifacts import ArtifactStore, parse_hardhat_artifact
from contract_deployments.exceptions import ArtifactNotFoundError


class TestParseHardhatArtifact:
    """Test the parse_hardhat_artifact function."""

    def test_parses_complete_artifact(self, artifacts_dir: Path):
        """Test parsing an artifact with a debug file and build info."""
        artifact = parse_hardhat_artifact(
            artifacts_dir / "contracts" / "ERC777Bonding.sol" / "ERC777Bonding.json"
        )

        assert artifact.name == "ERC777Bonding"
        assert artifact.source_name == "contracts/ERC777Bonding.sol"
        assert artifact.bytecode.startswith("0x6080")
        assert artifact.abi[0]["type"] == "constructor"
        assert artifact.fully_qualified_name == "contracts/ERC777Bonding.sol:ERC777Bonding"

    def test_attaches_build_info(self, artifacts_dir: Path):
        """Test that the compiler version and standard JSON input are attached."""
        artifact = parse_hardhat_artifact(
            artifacts_dir / "contracts" / "ERC777Bonding.sol" / "ERC777Bonding.json"
        )

        assert artifact.build_info["solcLongVersion"] == "0.8.20+commit.a1b79de6"
        assert artifact.build_info["input"]["language"] == "Solidity"

    def test_missing_debug_file_leaves_build_info_empty(self, artifacts_dir: Path):
        """Test that an artifact without a .dbg.json still loads."""
        artifact = parse_hardhat_artifact(artifacts_dir / "contracts" / "Token.sol" / "Token.json")

        assert artifact.name == "Token"
        assert artifact.build_info is None

    def test_interface_without_bytecode_is_rejected(self, tmp_path: Path):
        """Test that abstract contracts and interfaces cannot be deployed."""
        path = tmp_path / "IToken.json"
        path.write_text(json.dumps({"contractName": "IToken", "abi": [], "bytecode": "0x"}))

        with pytest.raises(ArtifactNotFoundError):
            parse_hardhat_artifact(path)

    def test_name_falls_back_to_file_stem(self, tmp_path: Path):
        """Test that artifacts without contractName use their file name."""
        path = tmp_path / "Plain.json"
        path.write_text(json.dumps({"abi": [], "bytecode": "0x6080"}))

        assert parse_hardhat_artifact(path).name == "Plain"


class TestArtifactStore:
    """Test the ArtifactStore class."""

    def test_finds_nested_artifact(self, artifact_store: ArtifactStore):
        """Test that artifacts are found below their source directories."""
        path = artifact_store.find("ERC777Coin")

        assert path is not None
        assert path.name == "ERC777Coin.json"

    def test_debug_files_are_not_artifacts(self, artifact_store: ArtifactStore):
        """Test that .dbg.json files are not mistaken for artifacts."""
        assert artifact_store.find("ERC777Coin.dbg") is None

    def test_load_caches_result(self, artifact_store: ArtifactStore):
        """Test that repeated loads return the same object."""
        assert artifact_store.load("Token") is artifact_store.load("Token")

    def test_unknown_contract_raises(self, artifact_store: ArtifactStore):
        """Test that a missing artifact raises ArtifactNotFoundError."""
        with pytest.raises(ArtifactNotFoundError) as exc_info:
            artifact_store.load("DoesNotExist")

        assert "DoesNotExist" in str(exc_info.value)

    def test_missing_directory_raises(self, tmp_path: Path):
        """Test that a store over a missing directory finds nothing."""
        with pytest.raises(ArtifactNotFoundError):
            ArtifactStore(tmp_path / "nope").load("Token")
