"""
Albatross blockchain subscriptions

Head-block, validator-election and log streams over the subscription
channel.
"""

from dataclasses import replace
from typing import Any, Iterable, Optional

from ..rpc.websocket import StreamCallback, StreamOptions, Subscription, WebSocketClient
from ..types import BlockSubscriptionType, BlockType, LogType, RetrieveType


def get_block_type(block: Any) -> BlockSubscriptionType:
    """
    Classify a block from a head-block stream.

    Full and partial blocks carry ``type``; macro blocks also carry
    ``isElectionBlock``, which decides the kind when ``type`` is absent.
    """
    if not isinstance(block, dict):
        raise ValueError("Block is undefined")
    if "type" in block:
        if BlockType(block["type"]) is BlockType.MICRO:
            return BlockSubscriptionType.MICRO
        return BlockSubscriptionType.ELECTION if block.get("isElectionBlock") else BlockSubscriptionType.MACRO
    if "isElectionBlock" not in block:
        return BlockSubscriptionType.MICRO
    if block["isElectionBlock"]:
        return BlockSubscriptionType.ELECTION
    return BlockSubscriptionType.MACRO


def is_micro(block: Any) -> bool:
    return get_block_type(block) is BlockSubscriptionType.MICRO


def is_macro(block: Any) -> bool:
    return get_block_type(block) is BlockSubscriptionType.MACRO


def is_election(block: Any) -> bool:
    return get_block_type(block) is BlockSubscriptionType.ELECTION


class BlockchainStreams:
    """Subscriptions to chain events."""

    namespace = "blockchain_streams"

    def __init__(self, ws: WebSocketClient):
        self.ws = ws

    async def subscribe_for_block_hashes(self, options: Optional[StreamOptions] = None,
                                         callback: Optional[StreamCallback] = None) -> Subscription:
        """Streams the hash of every new head block."""
        return await self.ws.subscribe("subscribeForHeadBlockHash", [], options, callback)

    async def _head_blocks(self, retrieve: RetrieveType, options: Optional[StreamOptions],
                           callback: Optional[StreamCallback], block_filter=None) -> Subscription:
        options = options or StreamOptions()
        if block_filter is not None:
            options = replace(options, filter=block_filter)
        full = RetrieveType(retrieve) is RetrieveType.FULL
        return await self.ws.subscribe("subscribeForHeadBlock", [full], options, callback)

    async def subscribe_for_blocks(self, retrieve: RetrieveType = RetrieveType.FULL,
                                   options: Optional[StreamOptions] = None,
                                   callback: Optional[StreamCallback] = None) -> Subscription:
        """
        Streams every new head block.

        Args:
            retrieve: ``FULL`` includes transactions, ``PARTIAL`` only the header
            options: StreamOptions (once, filter, timeout, with_metadata)
            callback: Delivery callback
        """
        return await self._head_blocks(retrieve, options, callback)

    async def subscribe_for_micro_blocks(self, retrieve: RetrieveType = RetrieveType.FULL,
                                         options: Optional[StreamOptions] = None,
                                         callback: Optional[StreamCallback] = None) -> Subscription:
        return await self._head_blocks(retrieve, options, callback, is_micro)

    async def subscribe_for_macro_blocks(self, retrieve: RetrieveType = RetrieveType.FULL,
                                         options: Optional[StreamOptions] = None,
                                         callback: Optional[StreamCallback] = None) -> Subscription:
        """Macro blocks that are not election blocks."""
        return await self._head_blocks(retrieve, options, callback, is_macro)

    async def subscribe_for_election_blocks(self, retrieve: RetrieveType = RetrieveType.FULL,
                                            options: Optional[StreamOptions] = None,
                                            callback: Optional[StreamCallback] = None) -> Subscription:
        return await self._head_blocks(retrieve, options, callback, is_election)

    async def subscribe_for_validator_election_by_address(
        self,
        address: str,
        options: Optional[StreamOptions] = None,
        callback: Optional[StreamCallback] = None,
    ) -> Subscription:
        """Streams the validator entry of ``address`` at each election."""
        return await self.ws.subscribe("subscribeForValidatorElectionByAddress", [address], options, callback)

    async def subscribe_for_logs_by_addresses_and_types(
        self,
        addresses: Optional[Iterable[str]] = None,
        types: Optional[Iterable[LogType]] = None,
        options: Optional[StreamOptions] = None,
        callback: Optional[StreamCallback] = None,
    ) -> Subscription:
        """
        Streams block logs touching the given addresses.

        Empty ``addresses`` or ``types`` means no restriction on that axis.
        """
        params = [
            list(addresses or []),
            [LogType(t).value for t in (types or [])],
        ]
        return await self.ws.subscribe("subscribeForLogsByAddressesAndTypes", params, options, callback)
