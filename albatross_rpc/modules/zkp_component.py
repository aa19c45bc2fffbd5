"""
Albatross zkp component RPC Methods
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..rpc.messages import CallOptions, CallResult
from .base import RPCModule, rpc_method


@dataclass(frozen=True)
class ZkpState:
    """Latest zero-knowledge proof known to the node."""
    latest_header_number: int
    latest_block_number: int
    latest_proof: Optional[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZkpState":
        # The node answers with kebab-case keys
        return cls(
            latest_header_number=data["latest-header-number"],
            latest_block_number=data["latest-block-number"],
            latest_proof=data.get("latest-proof"),
        )


class ZkpComponentModule(RPCModule):
    """
    ZKP component RPC methods.
    """

    namespace = "zkp_component"

    @rpc_method
    async def get_zkp_state(self, options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns the latest header number, block number and proof.

        Returns:
            CallResult with a `ZkpState`
        """
        return await self._call("getZkpState", options=options, parse=ZkpState.from_dict)
