"""
Commitment Tree API Package

This package provides access to the shield contract's commitment tree and the
service layer used by the REST API. It includes:

- ShieldContractClient: JSON-RPC client for tree nodes and the latest root
- WitnessService: path resolution and witness encoding for API responses

Usage:
    from shield_proofs.api import ShieldContractClient

    client = ShieldContractClient()
    root = client.get_root()
"""

from .tree_client import ShieldContractClient
from .witness_service import WitnessService, WitnessServiceError

__all__ = [
    'ShieldContractClient',
    'WitnessService',
    'WitnessServiceError',
]
