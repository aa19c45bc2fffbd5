"""
Albatross mempool RPC Methods
"""

from typing import Optional

from ..rpc.messages import CallOptions, CallResult
from .base import RPCModule, rpc_method


class MempoolModule(RPCModule):
    """
    Mempool RPC methods.
    """

    namespace = "mempool"

    @rpc_method
    async def push_transaction(self, transaction: str, with_high_priority: bool = False,
                               options: Optional[CallOptions] = None) -> CallResult:
        """
        Pushes a serialized transaction to the mempool.

        Args:
            transaction: Serialized transaction (hex)
            with_high_priority: Use ``pushHighPriorityTransaction``

        Returns:
            CallResult with the transaction hash
        """
        method = "pushHighPriorityTransaction" if with_high_priority else "pushTransaction"
        return await self._call(method, [transaction], options=options)

    @rpc_method
    async def mempool_content(self, include_transactions: bool = False,
                              options: Optional[CallOptions] = None) -> CallResult:
        """Hashes (or full transactions) currently in the mempool."""
        return await self._call("mempoolContent", [include_transactions], options=options)

    @rpc_method
    async def mempool(self, options: Optional[CallOptions] = None) -> CallResult:
        """Mempool size and fee buckets."""
        return await self._call("mempool", options=options)

    @rpc_method
    async def get_min_fee_per_byte(self, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getMinFeePerByte", options=options)

    @rpc_method
    async def get_transaction_from_mempool(self, hash: str, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getTransactionFromMempool", [hash], options=options)
