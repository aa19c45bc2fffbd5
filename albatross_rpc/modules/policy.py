"""
Albatross policy RPC Methods

Pure functions of the chain parameters: epoch and batch arithmetic, election
and macro block positions, and the supply curve. None of them read chain
state, so they answer for any block number.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..rpc.messages import CallOptions, CallResult
from .base import RPCModule, require, rpc_method


@dataclass
class SupplyAtParams:
    """Inputs of the supply curve; times are Unix milliseconds."""
    genesis_supply: int
    genesis_time: int
    current_time: int

    def to_params(self) -> List[int]:
        require(self.genesis_supply, "genesis_supply")
        require(self.genesis_time, "genesis_time")
        require(self.current_time, "current_time")
        return [self.genesis_supply, self.genesis_time, self.current_time]


class PolicyModule(RPCModule):
    """
    Policy RPC methods.
    """

    namespace = "policy"

    @rpc_method
    async def get_policy_constants(self, options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns the policy constants of the chain (staking contract address,
        blocks per batch, batches per epoch, and so on).
        """
        return await self._call("getPolicyConstants", options=options)

    @rpc_method
    async def get_epoch_at(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        """Epoch number of the given block."""
        return await self._call("getEpochAt", [block_number], options=options)

    @rpc_method
    async def get_epoch_index_at(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        """Index of the block within its epoch."""
        return await self._call("getEpochIndexAt", [block_number], options=options)

    @rpc_method
    async def get_batch_at(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        """Batch number of the given block."""
        return await self._call("getBatchAt", [block_number], options=options)

    @rpc_method
    async def get_batch_index_at(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        """Index of the block within its batch."""
        return await self._call("getBatchIndexAt", [block_number], options=options)

    @rpc_method
    async def get_election_block_after(self, block_number: int,
                                       options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getElectionBlockAfter", [block_number], options=options)

    @rpc_method
    async def get_election_block_before(self, block_number: int,
                                        options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getElectionBlockBefore", [block_number], options=options)

    @rpc_method
    async def get_last_election_block(self, block_number: int,
                                      options: Optional[CallOptions] = None) -> CallResult:
        """Last election block at or before the given block."""
        return await self._call("getLastElectionBlock", [block_number], options=options)

    @rpc_method
    async def is_election_block_at(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("isElectionBlockAt", [block_number], options=options)

    @rpc_method
    async def get_macro_block_after(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getMacroBlockAfter", [block_number], options=options)

    @rpc_method
    async def get_macro_block_before(self, block_number: int,
                                     options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getMacroBlockBefore", [block_number], options=options)

    @rpc_method
    async def get_last_macro_block(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        """Last macro block at or before the given block."""
        return await self._call("getLastMacroBlock", [block_number], options=options)

    @rpc_method
    async def is_macro_block_at(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("isMacroBlockAt", [block_number], options=options)

    @rpc_method
    async def is_micro_block_at(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("isMicroBlockAt", [block_number], options=options)

    @rpc_method
    async def get_first_block_of_epoch(self, epoch_index: int, options: Optional[CallOptions] = None) -> CallResult:
        """First block of the epoch (always a micro block)."""
        return await self._call("getFirstBlockOf", [epoch_index], options=options)

    @rpc_method
    async def get_block_after_reporting_window(self, block_number: int,
                                               options: Optional[CallOptions] = None) -> CallResult:
        """First block after the reporting window of the given block (always a micro block)."""
        return await self._call("getBlockAfterReportingWindow", [block_number], options=options)

    @rpc_method
    async def get_block_after_jail(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        """First block after the jail period of a validator jailed at the given block."""
        return await self._call("getBlockAfterJail", [block_number], options=options)

    @rpc_method
    async def get_first_block_of_batch(self, batch_index: int, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getFirstBlockOfBatch", [batch_index], options=options)

    @rpc_method
    async def get_election_block_of_epoch(self, epoch_index: int,
                                          options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getElectionBlockOf", [epoch_index], options=options)

    @rpc_method
    async def get_macro_block_of_batch(self, batch_index: int, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getMacroBlockOf", [batch_index], options=options)

    @rpc_method
    async def get_first_batch_of_epoch(self, block_number: int, options: Optional[CallOptions] = None) -> CallResult:
        """Whether the given block belongs to the first batch of its epoch."""
        return await self._call("getFirstBatchOfEpoch", [block_number], options=options)

    @rpc_method
    async def get_supply_at(self, p: SupplyAtParams, options: Optional[CallOptions] = None) -> CallResult:
        """
        Supply in Luna at ``p.current_time``:

            supply(t) = genesis_supply + velocity / decay * (1 - e^(-decay * t))

        with t the milliseconds since genesis.
        """
        return await self._call("getSupplyAt", p, options=options)
