"""
Albatross network RPC Methods

Peer information of the node.
"""

from typing import Optional

from ..rpc.messages import CallOptions, CallResult
from .base import RPCModule, rpc_method


class NetworkModule(RPCModule):
    """
    Network RPC methods.
    """

    namespace = "network"

    @rpc_method
    async def get_peer_id(self, options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns the peer id of the node.

        Returns:
            CallResult with the peer id string
        """
        return await self._call("getPeerId", options=options)

    @rpc_method
    async def get_peer_count(self, options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns the number of connected peers.

        Returns:
            CallResult with the peer count
        """
        return await self._call("getPeerCount", options=options)

    @rpc_method
    async def get_peer_list(self, options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns the peer ids of all connected peers.

        Returns:
            CallResult with a list of peer ids
        """
        return await self._call("getPeerList", options=options)
