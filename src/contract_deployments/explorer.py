"""Etherscan-compatible explorer client for source verification."""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Protocol

import requests

from .exceptions import ExplorerUnavailableError
from .types import ContractArtifact, ExplorerResponse

logger = logging.getLogger(__name__)

PENDING_MESSAGE = "Pending in queue"


class Explorer(Protocol):
    """What the Verifier needs from a block explorer."""

    def submit_verification(
        self,
        address: str,
        source_metadata: Dict[str, Any],
        constructor_args_encoded: str,
        timeout: Optional[float] = None,
    ) -> ExplorerResponse: ...


def source_metadata(artifact: ContractArtifact) -> Dict[str, Any]:
    """
    Build the verification metadata for an artifact.

    Args:
        artifact: Compiled contract with build info

    Returns:
        Dictionary with contract_name, compiler_version, source_code
        (standard JSON input, serialized) and code_format
    """
    build_info = artifact.build_info or {}
    compiler_version = build_info.get("solcLongVersion")
    return {
        "contract_name": artifact.fully_qualified_name,
        "compiler_version": f"v{compiler_version}" if compiler_version else None,
        "source_code": json.dumps(build_info["input"]) if build_info.get("input") else None,
        "code_format": "solidity-standard-json-input",
    }


class EtherscanExplorer:
    """Explorer backed by the Etherscan `contract` API module."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        chain_id: Optional[int] = None,
        status_checks: int = 12,
        status_interval: float = 5.0,
        request_timeout: float = 30,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.chain_id = chain_id
        self.status_checks = status_checks
        self.status_interval = status_interval
        self.request_timeout = request_timeout
        self._sleep = sleep
        self._session = requests.Session()

    def _request(self, method: str, payload: Dict[str, Any]) -> ExplorerResponse:
        params: Dict[str, Any] = {"apikey": self.api_key, "module": "contract"}
        if self.chain_id is not None:
            params["chainid"] = self.chain_id

        try:
            if method == "POST":
                response = self._session.post(
                    self.api_url, params=params, data=payload, timeout=self.request_timeout
                )
            else:
                response = self._session.get(
                    self.api_url, params={**params, **payload}, timeout=self.request_timeout
                )
        except requests.RequestException as e:
            raise ExplorerUnavailableError(f"Network error talking to explorer: {e}") from e

        if response.status_code != 200:
            return ExplorerResponse(
                ok=False,
                message=f"HTTP {response.status_code}: {response.text[:200]}",
                http_status=response.status_code,
            )

        try:
            result = response.json()
        except ValueError:
            return ExplorerResponse(
                ok=False, message=f"Malformed explorer response: {response.text[:200]}", http_status=200
            )

        return ExplorerResponse(
            ok=str(result.get("status")) == "1",
            message=str(result.get("result") or result.get("message", "")),
            http_status=200,
        )

    def submit_verification(
        self,
        address: str,
        source_metadata: Dict[str, Any],
        constructor_args_encoded: str,
        timeout: Optional[float] = None,
    ) -> ExplorerResponse:
        """
        Submit a verification request and follow it to a final status.

        Args:
            address: Deployed contract address
            source_metadata: Output of source_metadata()
            constructor_args_encoded: ABI-encoded constructor arguments, hex without 0x
            timeout: Most seconds to spend waiting between status checks
                (no limit beyond status_checks if None)

        Returns:
            ExplorerResponse of the final status check, or of the submission
            if it was rejected outright

        Raises:
            ExplorerUnavailableError: If the explorer cannot be reached
        """
        submission = self._request(
            "POST",
            {
                "action": "verifysourcecode",
                "contractaddress": address,
                "sourceCode": source_metadata.get("source_code") or "",
                "codeformat": source_metadata.get("code_format", "solidity-standard-json-input"),
                "contractname": source_metadata.get("contract_name", ""),
                "compilerversion": source_metadata.get("compiler_version") or "",
                # Misspelling is part of the Etherscan API
                "constructorArguements": constructor_args_encoded,
            },
        )
        if not submission.ok:
            return submission

        guid = submission.message
        logger.info("Verification submitted for %s (guid %s)", address, guid)

        status = ExplorerResponse(ok=False, message=PENDING_MESSAGE)
        waited = 0.0
        for _ in range(self.status_checks):
            if timeout is not None and waited + self.status_interval > timeout:
                logger.debug("Stopped status checks for %s after %.0fs", address, waited)
                break
            self._sleep(self.status_interval)
            waited += self.status_interval
            status = self._request("GET", {"action": "checkverifystatus", "guid": guid})
            if PENDING_MESSAGE.lower() not in status.message.lower():
                return status
            logger.debug("Verification of %s still pending", address)

        return status
