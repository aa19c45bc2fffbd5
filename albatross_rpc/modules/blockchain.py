"""
Albatross blockchain RPC Methods

Read-only chain queries: blocks, transactions, inherents, accounts,
validators and stakers.
"""

from typing import Any, Optional

from ..rpc.messages import CallOptions, CallResult
from ..types import AccountType
from .base import RPCModule, rpc_method


def get_account_type(account: Any) -> AccountType:
    """Kind of an account returned by ``getAccountByAddress`` or ``getAccounts``."""
    if not isinstance(account, dict):
        raise ValueError("Account is undefined")
    return AccountType(account.get("type"))


class BlockchainModule(RPCModule):
    """
    Blockchain RPC methods.
    """

    namespace = "blockchain"

    @rpc_method
    async def get_block_number(self, options: Optional[CallOptions] = None) -> CallResult:
        """Returns the block number of the current head."""
        return await self._call("getBlockNumber", options=options)

    @rpc_method
    async def get_batch_number(self, options: Optional[CallOptions] = None) -> CallResult:
        """Returns the batch number of the current head."""
        return await self._call("getBatchNumber", options=options)

    @rpc_method
    async def get_epoch_number(self, options: Optional[CallOptions] = None) -> CallResult:
        """Returns the epoch number of the current head."""
        return await self._call("getEpochNumber", options=options)

    @rpc_method
    async def get_block_by_hash(self, hash: str, include_body: Optional[bool] = None,
                                options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns the block with the given hash.

        Args:
            hash: Block hash
            include_body: Include the transactions in the block

        Returns:
            CallResult with the block
        """
        return await self._call("getBlockByHash", [hash, include_body], options=options)

    @rpc_method
    async def get_block_by_number(self, block_number: int, include_body: Optional[bool] = None,
                                  options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns the block at the given height.

        Args:
            block_number: Block height
            include_body: Include the transactions in the block

        Returns:
            CallResult with the block
        """
        return await self._call("getBlockByNumber", [block_number, include_body], options=options)

    @rpc_method
    async def get_latest_block(self, include_body: bool = False,
                               options: Optional[CallOptions] = None) -> CallResult:
        """Returns the current head block."""
        return await self._call("getLatestBlock", [include_body], options=options)

    @rpc_method
    async def get_slot_at(self, block_number: int, offset: Optional[int] = None,
                          with_metadata: bool = False, options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns the validator slot producing the block at the given height.

        Args:
            block_number: Block height
            offset: View-change offset; defaults to the one of the block
            with_metadata: Attach the chain state the answer refers to
        """
        return await self._call("getSlotAt", [block_number, offset], with_metadata=with_metadata, options=options)

    @rpc_method
    async def get_transaction_by_hash(self, hash: str, options: Optional[CallOptions] = None) -> CallResult:
        """Returns the transaction with the given hash."""
        return await self._call("getTransactionByHash", [hash], options=options)

    @rpc_method
    async def get_transactions_by_block_number(self, block_number: int,
                                               options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getTransactionsByBlockNumber", [block_number], options=options)

    @rpc_method
    async def get_transactions_by_batch_number(self, batch_index: int,
                                               options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getTransactionsByBatchNumber", [batch_index], options=options)

    @rpc_method
    async def get_transactions_by_address(
        self,
        address: str,
        max: Optional[int] = None,
        start_at: Optional[str] = None,
        just_hashes: bool = False,
        options: Optional[CallOptions] = None,
    ) -> CallResult:
        """
        Returns the transactions (or only their hashes) touching an address.

        Args:
            address: Account address
            max: Maximum number of entries
            start_at: Hash of the transaction to continue after
            just_hashes: Return hashes via ``getTransactionHashesByAddress``
        """
        method = "getTransactionHashesByAddress" if just_hashes else "getTransactionsByAddress"
        return await self._call(method, [address, max, start_at], options=options)

    @rpc_method
    async def get_inherents_by_block_number(self, block_number: int,
                                            options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getInherentsByBlockNumber", [block_number], options=options)

    @rpc_method
    async def get_inherents_by_batch_number(self, batch_index: int,
                                            options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getInherentsByBatchNumber", [batch_index], options=options)

    @rpc_method
    async def get_account_by_address(self, address: str, with_metadata: bool = False,
                                     options: Optional[CallOptions] = None) -> CallResult:
        """Returns the account state of an address."""
        return await self._call("getAccountByAddress", [address], with_metadata=with_metadata, options=options)

    @rpc_method
    async def get_accounts(self, options: Optional[CallOptions] = None) -> CallResult:
        """
        Returns every account in the accounts tree.

        Iterates the whole tree on the node; expensive.
        """
        return await self._call("getAccounts", options=options)

    @rpc_method
    async def get_active_validators(self, with_metadata: bool = False,
                                    options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getActiveValidators", with_metadata=with_metadata, options=options)

    @rpc_method
    async def get_current_penalized_slots(self, with_metadata: bool = False,
                                          options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getCurrentPenalizedSlots", with_metadata=with_metadata, options=options)

    @rpc_method
    async def get_previous_penalized_slots(self, with_metadata: bool = False,
                                           options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getPreviousPenalizedSlots", with_metadata=with_metadata, options=options)

    @rpc_method
    async def get_validator_by_address(self, address: str, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getValidatorByAddress", [address], options=options)

    @rpc_method
    async def get_validators(self, options: Optional[CallOptions] = None) -> CallResult:
        """Returns every validator in the staking contract. Expensive."""
        return await self._call("getValidators", options=options)

    @rpc_method
    async def get_stakers_by_validator_address(self, address: str,
                                               options: Optional[CallOptions] = None) -> CallResult:
        """Returns the stakers delegating to a validator. Expensive."""
        return await self._call("getStakersByValidatorAddress", [address], options=options)

    @rpc_method
    async def get_staker_by_address(self, address: str, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getStakerByAddress", [address], options=options)
