"""
Albatross RPC Modules

Typed method groups built on the call and subscription channels.
"""

from .base import RPCModule
from .blockchain import BlockchainModule
from .blockchain_streams import BlockchainStreams
from .consensus import ConsensusModule
from .mempool import MempoolModule
from .network import NetworkModule
from .policy import PolicyModule
from .validator import ValidatorModule
from .wallet import WalletModule
from .zkp_component import ZkpComponentModule

__all__ = [
    "RPCModule",
    "BlockchainModule",
    "BlockchainStreams",
    "ConsensusModule",
    "MempoolModule",
    "NetworkModule",
    "PolicyModule",
    "ValidatorModule",
    "WalletModule",
    "ZkpComponentModule",
]
