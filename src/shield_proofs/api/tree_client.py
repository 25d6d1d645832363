"""
Shield Contract Tree Client

This module provides a read-only client for the commitment tree held by the
shield contract. It implements the TreeAccessor protocol used by path
resolution: individual tree nodes come from the contract's public node array
M(uint256) and the latest root from latestRoot().
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from web3 import Web3

from ..exceptions import TreeAccessError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Only the two read functions path resolution needs
SHIELD_TREE_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "", "type": "uint256"}],
        "name": "M",
        "outputs": [{"name": "", "type": "bytes27"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "latestRoot",
        "outputs": [{"name": "", "type": "bytes32"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class ShieldContractClient:
    """
    Client for reading the shield contract's Merkle tree over JSON-RPC.

    Provides get_node and get_root with transport errors reported as
    TreeAccessError.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        contract_address: Optional[str] = None,
        timeout: int = 30,
    ):
        """
        Initialize the shield contract client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint. If None, uses SHIELD_RPC_URL env var.
            contract_address: Shield contract address. If None, uses SHIELD_CONTRACT_ADDRESS env var.
            timeout: Request timeout in seconds
        """
        self.rpc_url = rpc_url or os.getenv("SHIELD_RPC_URL")
        if not self.rpc_url:
            raise ValueError("SHIELD_RPC_URL environment variable is not set")

        address = contract_address or os.getenv("SHIELD_CONTRACT_ADDRESS")
        if not address:
            raise ValueError("SHIELD_CONTRACT_ADDRESS environment variable is not set")
        if not Web3.is_address(address):
            raise ValueError(f"Invalid shield contract address: {address}")
        self.contract_address = Web3.to_checksum_address(address)

        self.w3 = Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": timeout}))
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=SHIELD_TREE_ABI)

        logger.info(f"Initialized ShieldContractClient for {self.contract_address} via {self.rpc_url}")

    def get_node(self, index: int) -> str:
        """
        Fetch a tree node from the contract.

        Args:
            index: Array index of the node

        Returns:
            '0x'-prefixed node hash

        Raises:
            TreeAccessError: If the contract call fails
        """
        try:
            node = self.contract.functions.M(index).call()
        except Exception as e:
            raise TreeAccessError(
                f"Failed to read tree node {index} from {self.contract_address} at {self.rpc_url}. "
                f"Original error: {e}"
            )
        logger.debug(f"Fetched tree node {index}: 0x{bytes(node).hex()}")
        return f"0x{bytes(node).hex()}"

    def get_root(self) -> str:
        """
        Fetch the latest root from the contract.

        Raises:
            TreeAccessError: If the contract call fails
        """
        try:
            root = self.contract.functions.latestRoot().call()
        except Exception as e:
            raise TreeAccessError(
                f"Failed to read the latest root from {self.contract_address} at {self.rpc_url}. "
                f"Original error: {e}"
            )
        logger.info(f"Fetched latest root 0x{bytes(root).hex()}")
        return f"0x{bytes(root).hex()}"

    def health_check(self) -> bool:
        """
        Check if the RPC endpoint is reachable.

        Returns:
            True if the node answers, False otherwise
        """
        try:
            return bool(self.w3.is_connected())
        except Exception as e:
            logger.warning(f"Health check against {self.rpc_url} failed: {e}")
            return False
