"""Path management utilities for contract-deployments library."""

from pathlib import Path
from typing import Optional, Union

from .constants import ARTIFACTS_DIRNAME, CONFIG_FILENAME, DEPLOYMENTS_DIRNAME, UNITS_DIRNAME


def get_default_project_dir() -> Path:
    """
    Get default project directory (current working directory).

    Returns:
        Path to the directory the deploy command runs from
    """
    return Path.cwd()


def _project_root(project_root: Optional[Union[Path, str]]) -> Path:
    if project_root is None:
        return get_default_project_dir()
    return Path(project_root).absolute()


def get_config_path(project_root: Optional[Union[Path, str]] = None) -> Path:
    """
    Get the default config file location.

    Args:
        project_root: Custom project directory (defaults to the working directory)

    Returns:
        Path to deploy-config.json
    """
    return _project_root(project_root) / CONFIG_FILENAME


def get_project_paths(
    project_root: Optional[Union[Path, str]] = None,
) -> tuple[Path, Path, Path, Path]:
    """
    Get the standard project file locations.

    Args:
        project_root: Custom project directory (defaults to the working directory)

    Returns:
        Tuple of (config_path, artifacts_dir, deployments_dir, units_dir)
    """
    root = _project_root(project_root)

    config_path = get_config_path(root)
    artifacts_dir = root / ARTIFACTS_DIRNAME
    deployments_dir = root / DEPLOYMENTS_DIRNAME
    units_dir = root / UNITS_DIRNAME

    return (config_path, artifacts_dir, deployments_dir, units_dir)


def get_record_path(deployments_dir: Path, network: str, contract_name: str) -> Path:
    """
    Get the file holding the deployment record for one key.

    Args:
        deployments_dir: Root of the deployment record store
        network: Network name
        contract_name: Deployment name

    Returns:
        Path to deployments/{network}/{contract_name}.json
    """
    return deployments_dir / network / f"{contract_name}.json"
