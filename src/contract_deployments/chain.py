"""Network client for submitting and confirming contract deployments."""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from .constants import DEFAULT_POLL_INTERVAL
from .encoding import deployment_data, encode_constructor_args
from .exceptions import (
    ConfirmationTimeoutError,
    DeploymentError,
    InsufficientFundsError,
    TransactionRevertedError,
)
from .types import ConfirmedDeployment

logger = logging.getLogger(__name__)

# Headroom on top of the node's gas estimate
GAS_LIMIT_MULTIPLIER = 1.2

# Node rejections and transport failures (dropped connections, HTTP errors)
NODE_ERRORS = (ValueError, Web3Exception, requests.RequestException, OSError)


@dataclass(frozen=True)
class TxHandle:
    """A submitted, not yet confirmed, contract-creation transaction."""

    tx_hash: str
    from_account: str


class NetworkClient(Protocol):
    """What the Deployer needs from a blockchain node."""

    def submit_deployment(
        self, bytecode: str, abi: List[Dict[str, Any]], args: Sequence[Any], from_account: str
    ) -> TxHandle: ...

    def wait_confirmations(
        self, tx_handle: TxHandle, confirmations: int, timeout: float
    ) -> ConfirmedDeployment: ...


class Web3NetworkClient:
    """NetworkClient backed by a web3.py connection."""

    def __init__(
        self,
        w3: Web3,
        private_key: Optional[str] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.w3 = w3
        self.account = Account.from_key(private_key) if private_key else None
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_rpc_url(cls, rpc_url: str, private_key: Optional[str] = None, **kwargs: Any) -> "Web3NetworkClient":
        """
        Connect to a node over HTTP.

        Raises:
            DeploymentError: If the node is unreachable
        """
        w3 = Web3(Web3.HTTPProvider(rpc_url))
        if not w3.is_connected():
            raise DeploymentError(f"Cannot connect to RPC endpoint {rpc_url}")
        return cls(w3, private_key=private_key, **kwargs)

    def default_account(self) -> str:
        """
        Address deployments are sent from when none is configured.

        Local nodes expose unlocked accounts; the first one is used.
        """
        if self.account is not None:
            return self.account.address
        try:
            accounts = self.w3.eth.accounts
        except NODE_ERRORS as e:
            raise self._translate_node_error(e) from e
        if not accounts:
            raise DeploymentError("No deployer account: set a private key or use a node with unlocked accounts")
        return accounts[0]

    def submit_deployment(
        self, bytecode: str, abi: List[Dict[str, Any]], args: Sequence[Any], from_account: str
    ) -> TxHandle:
        """
        Build, fund-check and send a contract-creation transaction.

        Args:
            bytecode: Creation bytecode
            abi: Contract ABI (for the constructor signature)
            args: Ordered constructor arguments
            from_account: Deployer address

        Returns:
            TxHandle for wait_confirmations

        Raises:
            TransactionRevertedError: If gas estimation shows the constructor reverts
            InsufficientFundsError: If the account cannot cover the estimated cost
            DeploymentError: On any other node rejection
        """
        sender = Web3.to_checksum_address(from_account)
        data = deployment_data(bytecode, encode_constructor_args(abi, args))

        try:
            tx: Dict[str, Any] = {
                "from": sender,
                "data": data,
                "nonce": self.w3.eth.get_transaction_count(sender, "pending"),
                "gasPrice": self.w3.eth.gas_price,
                "chainId": self.w3.eth.chain_id,
            }
        except NODE_ERRORS as e:
            raise self._translate_node_error(e) from e

        try:
            gas_estimate = self.w3.eth.estimate_gas(tx)
        except ContractLogicError as e:
            raise TransactionRevertedError(f"Constructor reverts during gas estimation: {e}") from e
        except NODE_ERRORS as e:
            raise self._translate_node_error(e) from e
        tx["gas"] = int(gas_estimate * GAS_LIMIT_MULTIPLIER)

        cost = tx["gas"] * tx["gasPrice"]
        try:
            balance = self.w3.eth.get_balance(sender)
        except NODE_ERRORS as e:
            raise self._translate_node_error(e) from e
        if balance < cost:
            raise InsufficientFundsError(
                f"Account {sender} has {Web3.from_wei(balance, 'ether')} ETH, "
                f"deployment needs up to {Web3.from_wei(cost, 'ether')} ETH"
            )

        try:
            if self.account is not None and self.account.address == sender:
                signed = self.account.sign_transaction(tx)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = self.w3.eth.send_transaction(tx)
        except NODE_ERRORS as e:
            raise self._translate_node_error(e) from e

        logger.info("Deployment transaction sent: %s (gas limit %s)", Web3.to_hex(tx_hash), tx["gas"])
        return TxHandle(tx_hash=Web3.to_hex(tx_hash), from_account=sender)

    def wait_confirmations(
        self, tx_handle: TxHandle, confirmations: int, timeout: float
    ) -> ConfirmedDeployment:
        """
        Block until the transaction is mined and buried under enough blocks.

        Args:
            tx_handle: Handle from submit_deployment
            confirmations: Required block depth (the inclusion block counts as one)
            timeout: Seconds to wait in total

        Returns:
            ConfirmedDeployment

        Raises:
            TransactionRevertedError: If the transaction was mined with status 0
            ConfirmationTimeoutError: If the depth is not reached in time
        """
        deadline = self._clock() + timeout

        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_handle.tx_hash, timeout=timeout, poll_latency=self.poll_interval
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(
                f"Transaction {tx_handle.tx_hash} not mined within {timeout}s"
            ) from e
        except NODE_ERRORS as e:
            raise self._translate_node_error(e) from e

        if receipt["status"] != 1:
            raise TransactionRevertedError(
                f"Deployment transaction {tx_handle.tx_hash} reverted in block {receipt['blockNumber']}"
            )

        block_number = receipt["blockNumber"]
        while self._current_block() - block_number + 1 < confirmations:
            if self._clock() >= deadline:
                raise ConfirmationTimeoutError(
                    f"Transaction {tx_handle.tx_hash} did not reach {confirmations} "
                    f"confirmations within {timeout}s"
                )
            self._sleep(self.poll_interval)

        return ConfirmedDeployment(
            address=receipt["contractAddress"],
            tx_hash=tx_handle.tx_hash,
            block_number=block_number,
            receipt={
                "transactionHash": tx_handle.tx_hash,
                "blockNumber": block_number,
                "gasUsed": receipt.get("gasUsed"),
                "status": receipt["status"],
                "contractAddress": receipt["contractAddress"],
            },
        )

    def _current_block(self) -> int:
        try:
            return self.w3.eth.block_number
        except NODE_ERRORS as e:
            raise self._translate_node_error(e) from e

    @staticmethod
    def _translate_node_error(error: Exception) -> DeploymentError:
        message = str(error)
        if "insufficient funds" in message.lower():
            return InsufficientFundsError(f"Node rejected deployment: {message}")
        if "revert" in message.lower():
            return TransactionRevertedError(f"Node rejected deployment: {message}")
        return DeploymentError(f"Node request failed: {message}")
