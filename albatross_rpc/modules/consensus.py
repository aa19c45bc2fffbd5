"""
Albatross consensus RPC Methods

Transaction creation and submission. Every transaction kind comes as
``create_*`` (serialized transaction), ``send_*`` (transaction hash) and
``send_sync_*`` (send, then wait until a block log lists the hash).
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, NamedTuple, Optional, Tuple

from ..constants import DEFAULT_TIMEOUT_CONFIRMATION
from ..exceptions import InvalidParamsError, TransportNotReadyError
from ..logger import get_logger
from ..rpc.messages import (
    CallOptions,
    CallResult,
    RPCErrorCode,
    SendTxOptions,
    StreamMessage,
    SubscriptionError,
)
from ..rpc.http import HttpClient
from ..types import LogType
from .base import RPCModule, require, rpc_method, validate_address, validity_start_height
from .blockchain import BlockchainModule
from .blockchain_streams import BlockchainStreams

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Parameter objects
# ---------------------------------------------------------------------------

@dataclass(kw_only=True)
class TxParams:
    """
    Base of the transaction parameter objects.

    Subclasses list their wire order in ``_wire``; fields in ``_optional``
    may be ``None`` and fields in ``_addresses`` must be valid addresses.
    Exactly one of ``relative_validity`` (sent as ``"+N"``) and
    ``absolute_validity`` (sent as ``"N"``) is required.
    """

    _wire: ClassVar[Tuple[str, ...]] = ()
    _optional: ClassVar[Tuple[str, ...]] = ()
    _addresses: ClassVar[Tuple[str, ...]] = ()
    _coins: ClassVar[Tuple[str, ...]] = ("value", "fee")

    relative_validity: Optional[int] = None
    absolute_validity: Optional[int] = None

    def validity_start_height(self) -> str:
        return validity_start_height(self.relative_validity, self.absolute_validity)

    def to_params(self) -> List[Any]:
        """
        Validate and return the positional parameter list.

        Raises:
            InvalidParamsError: on a missing, malformed or negative field
        """
        params = []
        for name in self._wire:
            value = getattr(self, name)
            if value is None and name in self._optional:
                params.append(None)
                continue
            require(value, name)
            if name in self._addresses:
                validate_address(value, name)
            if name in self._coins and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise InvalidParamsError(f"'{name}' must be a non-negative integer amount in Luna, got {value!r}")
            params.append(value)
        params.append(self.validity_start_height())
        return params


@dataclass(kw_only=True)
class TransactionParams(TxParams):
    """Basic transfer; ``data`` switches to the ``*WithData`` methods."""
    _addresses = ("wallet", "recipient")

    wallet: str
    recipient: str
    value: int
    fee: int
    data: Optional[str] = None

    @property
    def _wire(self) -> Tuple[str, ...]:
        if self.data:
            return ("wallet", "recipient", "data", "value", "fee")
        return ("wallet", "recipient", "value", "fee")


@dataclass(kw_only=True)
class VestingTxParams(TxParams):
    _wire = ("wallet", "owner", "start_time", "time_step", "num_steps", "value", "fee")
    _addresses = ("wallet", "owner")

    wallet: str
    owner: str
    start_time: int
    time_step: int
    num_steps: int
    value: int
    fee: int


@dataclass(kw_only=True)
class RedeemVestingTxParams(TxParams):
    _wire = ("wallet", "contract_address", "recipient", "value", "fee")
    _addresses = ("wallet", "contract_address", "recipient")

    wallet: str
    contract_address: str
    recipient: str
    value: int
    fee: int


@dataclass(kw_only=True)
class HtlcTxParams(TxParams):
    _wire = ("wallet", "htlc_sender", "htlc_recipient", "hash_root", "hash_count", "timeout", "value", "fee")
    _addresses = ("wallet", "htlc_sender", "htlc_recipient")

    wallet: str
    htlc_sender: str
    htlc_recipient: str
    hash_root: str
    hash_count: int
    timeout: int
    value: int
    fee: int


@dataclass(kw_only=True)
class RedeemRegularHtlcTxParams(TxParams):
    _wire = ("wallet", "contract_address", "recipient", "pre_image", "hash_root", "hash_count", "value", "fee")
    _addresses = ("wallet", "contract_address", "recipient")

    wallet: str
    contract_address: str
    recipient: str
    pre_image: str
    hash_root: str
    hash_count: int
    value: int
    fee: int


@dataclass(kw_only=True)
class RedeemTimeoutHtlcTxParams(TxParams):
    _wire = ("wallet", "contract_address", "recipient", "value", "fee")
    _addresses = ("wallet", "contract_address", "recipient")

    wallet: str
    contract_address: str
    recipient: str
    value: int
    fee: int


@dataclass(kw_only=True)
class RedeemEarlyHtlcTxParams(TxParams):
    _wire = ("wallet", "htlc_address", "recipient", "htlc_sender_signature", "htlc_recipient_signature",
             "value", "fee")
    _addresses = ("wallet", "htlc_address", "recipient")

    wallet: str
    htlc_address: str
    recipient: str
    htlc_sender_signature: str
    htlc_recipient_signature: str
    value: int
    fee: int


@dataclass(kw_only=True)
class SignRedeemEarlyHtlcParams(TxParams):
    _wire = ("wallet", "htlc_address", "recipient", "value", "fee")
    _addresses = ("wallet", "htlc_address", "recipient")

    wallet: str
    htlc_address: str
    recipient: str
    value: int
    fee: int


@dataclass(kw_only=True)
class StakerTxParams(TxParams):
    """New staker; ``delegation`` is the validator to delegate to, if any."""
    _wire = ("sender_wallet", "staker_wallet", "delegation", "value", "fee")
    _optional = ("delegation",)
    _addresses = ("sender_wallet", "staker_wallet", "delegation")

    sender_wallet: str
    staker_wallet: str
    value: int
    fee: int
    delegation: Optional[str] = None


@dataclass(kw_only=True)
class StakeTxParams(TxParams):
    _wire = ("sender_wallet", "staker_wallet", "value", "fee")
    _addresses = ("sender_wallet", "staker_wallet")

    sender_wallet: str
    staker_wallet: str
    value: int
    fee: int


@dataclass(kw_only=True)
class UpdateStakerTxParams(TxParams):
    """Without ``sender_wallet`` the fee is paid from the staker's balance."""
    _wire = ("sender_wallet", "staker_wallet", "new_delegation", "reactivate_all_stake", "fee")
    _optional = ("sender_wallet", "new_delegation")
    _addresses = ("sender_wallet", "staker_wallet", "new_delegation")

    staker_wallet: str
    fee: int
    reactivate_all_stake: bool = False
    sender_wallet: Optional[str] = None
    new_delegation: Optional[str] = None


@dataclass(kw_only=True)
class SetInactiveStakeTxParams(TxParams):
    _wire = ("sender_wallet", "staker_wallet", "value", "fee")
    _addresses = ("sender_wallet", "staker_wallet")

    sender_wallet: str
    staker_wallet: str
    value: int
    fee: int


@dataclass(kw_only=True)
class UnstakeTxParams(TxParams):
    """The fee is paid from the funds being unstaked."""
    _wire = ("staker_wallet", "recipient", "value", "fee")
    _addresses = ("staker_wallet", "recipient")

    staker_wallet: str
    recipient: str
    value: int
    fee: int


@dataclass(kw_only=True)
class NewValidatorTxParams(TxParams):
    _wire = ("sender_wallet", "validator", "signing_secret_key", "voting_secret_key", "reward_address",
             "signal_data", "fee")
    _optional = ("signal_data",)
    _addresses = ("sender_wallet", "validator", "reward_address")

    sender_wallet: str
    validator: str
    signing_secret_key: str = field(repr=False)
    voting_secret_key: str = field(repr=False)
    reward_address: str
    fee: int
    signal_data: Optional[str] = None


@dataclass(kw_only=True)
class UpdateValidatorTxParams(TxParams):
    """``None`` for any ``new_*`` field leaves that setting unchanged."""
    _wire = ("sender_wallet", "validator", "new_signing_secret_key", "new_voting_secret_key",
             "new_reward_address", "new_signal_data", "fee")
    _optional = ("new_signing_secret_key", "new_voting_secret_key", "new_reward_address", "new_signal_data")
    _addresses = ("sender_wallet", "validator", "new_reward_address")

    sender_wallet: str
    validator: str
    fee: int
    new_signing_secret_key: Optional[str] = field(default=None, repr=False)
    new_voting_secret_key: Optional[str] = field(default=None, repr=False)
    new_reward_address: Optional[str] = None
    new_signal_data: Optional[str] = None


@dataclass(kw_only=True)
class DeactivateValidatorTxParams(TxParams):
    _wire = ("sender_wallet", "validator", "signing_secret_key", "fee")
    _addresses = ("sender_wallet", "validator")

    sender_wallet: str
    validator: str
    signing_secret_key: str = field(repr=False)
    fee: int


@dataclass(kw_only=True)
class ReactivateValidatorTxParams(DeactivateValidatorTxParams):
    pass


@dataclass(kw_only=True)
class RetireValidatorTxParams(TxParams):
    _wire = ("sender_wallet", "validator", "fee")
    _addresses = ("sender_wallet", "validator")

    sender_wallet: str
    validator: str
    fee: int


@dataclass(kw_only=True)
class DeleteValidatorTxParams(TxParams):
    _wire = ("validator", "recipient", "fee", "value")
    _addresses = ("validator", "recipient")

    validator: str
    recipient: str
    fee: int
    value: int


@dataclass(frozen=True)
class TxLog:
    """Confirmed transaction: its hash, the node's view of it and the block log."""
    hash: str
    tx: Any
    log: Optional[Any] = None


class TxKind(NamedTuple):
    create: str
    send: str
    # params -> (addresses, log types) to watch for the confirmation
    watch: Callable[[Any], Tuple[List[str], List[LogType]]]


def _basic_methods(p: TransactionParams) -> Tuple[str, str]:
    if p.data:
        return "createBasicTransactionWithData", "sendBasicTransactionWithData"
    return "createBasicTransaction", "sendBasicTransaction"


TX_KINDS: Dict[str, TxKind] = {
    "vesting": TxKind(
        "createNewVestingTransaction", "sendNewVestingTransaction",
        lambda p: ([p.wallet], []),
    ),
    "redeem_vesting": TxKind(
        "createRedeemVestingTransaction", "sendRedeemVestingTransaction",
        lambda p: ([p.wallet], []),
    ),
    "htlc": TxKind(
        "createNewHtlcTransaction", "sendNewHtlcTransaction",
        lambda p: ([p.wallet], []),
    ),
    "redeem_regular_htlc": TxKind(
        "createRedeemRegularHtlcTransaction", "sendRedeemRegularHtlcTransaction",
        lambda p: ([p.wallet], []),
    ),
    "redeem_timeout_htlc": TxKind(
        "createRedeemTimeoutHtlcTransaction", "sendRedeemTimeoutHtlcTransaction",
        lambda p: ([p.wallet], []),
    ),
    "redeem_early_htlc": TxKind(
        "createRedeemEarlyHtlcTransaction", "sendRedeemEarlyHtlcTransaction",
        lambda p: ([p.wallet], []),
    ),
    "staker": TxKind(
        "createNewStakerTransaction", "sendNewStakerTransaction",
        lambda p: ([p.sender_wallet], [LogType.CREATE_STAKER]),
    ),
    "stake": TxKind(
        "createStakeTransaction", "sendStakeTransaction",
        lambda p: ([p.sender_wallet], [LogType.STAKE]),
    ),
    "update_staker": TxKind(
        "createUpdateStakerTransaction", "sendUpdateStakerTransaction",
        lambda p: ([p.sender_wallet or p.staker_wallet], [LogType.UPDATE_STAKER]),
    ),
    "set_inactive_stake": TxKind(
        "createSetInactiveStakeTransaction", "sendSetInactiveStakeTransaction",
        lambda p: ([p.sender_wallet], [LogType.SET_ACTIVE_STAKE]),
    ),
    "unstake": TxKind(
        "createUnstakeTransaction", "sendUnstakeTransaction",
        lambda p: ([p.recipient], [LogType.REMOVE_STAKE]),
    ),
    "new_validator": TxKind(
        "createNewValidatorTransaction", "sendNewValidatorTransaction",
        lambda p: ([p.sender_wallet], [LogType.CREATE_VALIDATOR]),
    ),
    "update_validator": TxKind(
        "createUpdateValidatorTransaction", "sendUpdateValidatorTransaction",
        lambda p: ([p.validator], [LogType.UPDATE_VALIDATOR]),
    ),
    "deactivate_validator": TxKind(
        "createDeactivateValidatorTransaction", "sendDeactivateValidatorTransaction",
        lambda p: ([p.validator], [LogType.DEACTIVATE_VALIDATOR]),
    ),
    "reactivate_validator": TxKind(
        "createReactivateValidatorTransaction", "sendReactivateValidatorTransaction",
        lambda p: ([p.validator], [LogType.REACTIVATE_VALIDATOR]),
    ),
    "retire_validator": TxKind(
        "createRetireValidatorTransaction", "sendRetireValidatorTransaction",
        lambda p: ([p.validator], [LogType.RETIRE_VALIDATOR]),
    ),
    "delete_validator": TxKind(
        "createDeleteValidatorTransaction", "sendDeleteValidatorTransaction",
        lambda p: ([p.validator], [LogType.DELETE_VALIDATOR]),
    ),
}


# ---------------------------------------------------------------------------
# Confirmation watcher
# ---------------------------------------------------------------------------

class ConfirmationWatch:
    """
    Collects transaction hashes from block logs until the expected one shows
    up. The hash is usually learned after the subscription is open, so logs
    seen before `expect()` are remembered.
    """

    def __init__(self):
        self.future: asyncio.Future = asyncio.get_running_loop().create_future()
        self.expected: Optional[str] = None
        self.seen: Dict[str, Any] = {}

    def on_log(self, message: StreamMessage) -> None:
        if not message.ok or not isinstance(message.data, dict):
            return
        for tx in message.data.get("transactions") or []:
            if isinstance(tx, dict) and tx.get("hash"):
                self.seen.setdefault(tx["hash"], message.data)
        self._check()

    def expect(self, tx_hash: str) -> None:
        self.expected = tx_hash
        self._check()

    def _check(self) -> None:
        if self.expected in self.seen and not self.future.done():
            self.future.set_result(self.seen[self.expected])


# ---------------------------------------------------------------------------
# Module
# ---------------------------------------------------------------------------

class ConsensusModule(RPCModule):
    """
    Consensus RPC methods.
    """

    namespace = "consensus"

    def __init__(self, http: HttpClient, blockchain: BlockchainModule, streams: BlockchainStreams):
        super().__init__(http, streams.ws)
        self.blockchain = blockchain
        self.streams = streams

    @rpc_method
    async def is_consensus_established(self, options: Optional[CallOptions] = None) -> CallResult:
        """Returns whether the node has consensus with the network."""
        return await self._call("isConsensusEstablished", options=options)

    @rpc_method
    async def get_raw_transaction_info(self, raw_transaction: str,
                                       options: Optional[CallOptions] = None) -> CallResult:
        """Decodes a serialized transaction into its fields."""
        return await self._call("getRawTransactionInfo", [raw_transaction], options=options)

    # -- Generic create / send / send_sync ------------------------------------

    async def _create(self, kind: str, p: TxParams, options: Optional[CallOptions]) -> CallResult:
        return await self._call(TX_KINDS[kind].create, p, options=options)

    async def _send(self, kind: str, p: TxParams, options: Optional[CallOptions]) -> CallResult:
        return await self._call(TX_KINDS[kind].send, p, options=options)

    async def _send_sync(self, kind: str, p: TxParams, options: Optional[SendTxOptions]) -> CallResult:
        addresses, types = TX_KINDS[kind].watch(p)
        return await self._send_and_wait(TX_KINDS[kind].send, p, addresses, types, options)

    async def _send_and_wait(
        self,
        method: str,
        p: TxParams,
        addresses: List[str],
        types: List[LogType],
        options: Optional[SendTxOptions],
    ) -> CallResult:
        """
        Send a transaction and wait for a block log listing its hash.

        The log subscription is opened before sending so a fast block cannot
        be missed. When no log arrives in time the node is asked for the
        transaction directly; only if that also fails is the result
        ``CONFIRMATION_TIMEOUT``.
        """
        options = options or SendTxOptions()
        wait_timeout = options.wait_for_confirmation_timeout
        if wait_timeout is None:
            wait_timeout = DEFAULT_TIMEOUT_CONFIRMATION

        try:
            p.to_params()
        except InvalidParamsError as exc:
            return self.http.reject(method, None, exc)

        watch = ConfirmationWatch()
        try:
            subscription = await self.streams.subscribe_for_logs_by_addresses_and_types(
                [a for a in addresses if a], types, callback=watch.on_log,
            )
        except SubscriptionError as exc:
            logger.warning(f"Could not watch confirmations for {method}: {exc}")
            return self.http.reject(method, p.to_params(), exc, code=exc.code)
        except TransportNotReadyError as exc:
            logger.warning(f"Could not watch confirmations for {method}: {exc}")
            return self.http.reject(method, p.to_params(), exc, code=RPCErrorCode.SERVICE_UNAVAILABLE)

        try:
            sent = await self._call(method, p, options=options)
            if not sent.ok:
                return sent
            tx_hash = sent.data
            watch.expect(tx_hash)
            block_log = None
            try:
                block_log = await asyncio.wait_for(watch.future, timeout=wait_timeout)
            except asyncio.TimeoutError:
                logger.info(f"No confirmation log for {tx_hash} within {wait_timeout}s, querying node")
        finally:
            subscription.close()

        tx = await self.blockchain.get_transaction_by_hash(tx_hash)
        if not tx.ok:
            message = (
                f"Error getting transaction {tx_hash}" if block_log is not None
                else f"Timeout waiting for confirmation of transaction {tx_hash}"
            )
            return CallResult.failure(sent.context, RPCErrorCode.CONFIRMATION_TIMEOUT, message)
        return CallResult.success(sent.context, TxLog(hash=tx_hash, tx=tx.data, log=block_log))

    # -- Basic transactions ---------------------------------------------------

    @rpc_method
    async def create_transaction(self, p: TransactionParams, options: Optional[CallOptions] = None) -> CallResult:
        """Returns a serialized basic transaction (with data when ``p.data`` is set)."""
        return await self._call(_basic_methods(p)[0], p, options=options)

    @rpc_method
    async def send_transaction(self, p: TransactionParams, options: Optional[CallOptions] = None) -> CallResult:
        """Sends a basic transaction; returns its hash."""
        return await self._call(_basic_methods(p)[1], p, options=options)

    @rpc_method
    async def send_sync_transaction(self, p: TransactionParams,
                                    options: Optional[SendTxOptions] = None) -> CallResult:
        """Sends a basic transaction and waits for its transfer log."""
        return await self._send_and_wait(
            _basic_methods(p)[1], p, [p.wallet, p.recipient], [LogType.TRANSFER], options,
        )

    # -- Vesting --------------------------------------------------------------

    @rpc_method
    async def create_new_vesting_transaction(self, p: VestingTxParams,
                                             options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("vesting", p, options)

    @rpc_method
    async def send_new_vesting_transaction(self, p: VestingTxParams,
                                           options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("vesting", p, options)

    @rpc_method
    async def send_sync_new_vesting_transaction(self, p: VestingTxParams,
                                                options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("vesting", p, options)

    @rpc_method
    async def create_redeem_vesting_transaction(self, p: RedeemVestingTxParams,
                                                options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("redeem_vesting", p, options)

    @rpc_method
    async def send_redeem_vesting_transaction(self, p: RedeemVestingTxParams,
                                              options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("redeem_vesting", p, options)

    @rpc_method
    async def send_sync_redeem_vesting_transaction(self, p: RedeemVestingTxParams,
                                                   options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("redeem_vesting", p, options)

    # -- HTLC -----------------------------------------------------------------

    @rpc_method
    async def create_new_htlc_transaction(self, p: HtlcTxParams,
                                          options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("htlc", p, options)

    @rpc_method
    async def send_new_htlc_transaction(self, p: HtlcTxParams,
                                        options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("htlc", p, options)

    @rpc_method
    async def send_sync_new_htlc_transaction(self, p: HtlcTxParams,
                                             options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("htlc", p, options)

    @rpc_method
    async def create_redeem_regular_htlc_transaction(self, p: RedeemRegularHtlcTxParams,
                                                     options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("redeem_regular_htlc", p, options)

    @rpc_method
    async def send_redeem_regular_htlc_transaction(self, p: RedeemRegularHtlcTxParams,
                                                   options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("redeem_regular_htlc", p, options)

    @rpc_method
    async def send_sync_redeem_regular_htlc_transaction(self, p: RedeemRegularHtlcTxParams,
                                                        options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("redeem_regular_htlc", p, options)

    @rpc_method
    async def create_redeem_timeout_htlc_transaction(self, p: RedeemTimeoutHtlcTxParams,
                                                     options: Optional[CallOptions] = None) -> CallResult:
        """Serialized HTLC redemption through the timeout-resolve path."""
        return await self._create("redeem_timeout_htlc", p, options)

    @rpc_method
    async def send_redeem_timeout_htlc_transaction(self, p: RedeemTimeoutHtlcTxParams,
                                                   options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("redeem_timeout_htlc", p, options)

    @rpc_method
    async def send_sync_redeem_timeout_htlc_transaction(self, p: RedeemTimeoutHtlcTxParams,
                                                        options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("redeem_timeout_htlc", p, options)

    @rpc_method
    async def create_redeem_early_htlc_transaction(self, p: RedeemEarlyHtlcTxParams,
                                                   options: Optional[CallOptions] = None) -> CallResult:
        """Serialized HTLC redemption through the early-resolve path (both signatures)."""
        return await self._create("redeem_early_htlc", p, options)

    @rpc_method
    async def send_redeem_early_htlc_transaction(self, p: RedeemEarlyHtlcTxParams,
                                                 options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("redeem_early_htlc", p, options)

    @rpc_method
    async def send_sync_redeem_early_htlc_transaction(self, p: RedeemEarlyHtlcTxParams,
                                                      options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("redeem_early_htlc", p, options)

    @rpc_method
    async def sign_redeem_early_htlc_transaction(self, p: SignRedeemEarlyHtlcParams,
                                                 options: Optional[CallOptions] = None) -> CallResult:
        """Returns the signature one party contributes to an early HTLC redemption."""
        return await self._call("signRedeemEarlyHtlcTransaction", p, options=options)

    # -- Staking --------------------------------------------------------------

    @rpc_method
    async def create_new_staker_transaction(self, p: StakerTxParams,
                                            options: Optional[CallOptions] = None) -> CallResult:
        """Serialized ``new_staker`` transaction; ``sender_wallet`` pays the fee."""
        return await self._create("staker", p, options)

    @rpc_method
    async def send_new_staker_transaction(self, p: StakerTxParams,
                                          options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("staker", p, options)

    @rpc_method
    async def send_sync_new_staker_transaction(self, p: StakerTxParams,
                                               options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("staker", p, options)

    @rpc_method
    async def create_stake_transaction(self, p: StakeTxParams,
                                       options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("stake", p, options)

    @rpc_method
    async def send_stake_transaction(self, p: StakeTxParams,
                                     options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("stake", p, options)

    @rpc_method
    async def send_sync_stake_transaction(self, p: StakeTxParams,
                                          options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("stake", p, options)

    @rpc_method
    async def create_update_staker_transaction(self, p: UpdateStakerTxParams,
                                               options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("update_staker", p, options)

    @rpc_method
    async def send_update_staker_transaction(self, p: UpdateStakerTxParams,
                                             options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("update_staker", p, options)

    @rpc_method
    async def send_sync_update_staker_transaction(self, p: UpdateStakerTxParams,
                                                  options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("update_staker", p, options)

    @rpc_method
    async def create_set_inactive_stake_transaction(self, p: SetInactiveStakeTxParams,
                                                    options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("set_inactive_stake", p, options)

    @rpc_method
    async def send_set_inactive_stake_transaction(self, p: SetInactiveStakeTxParams,
                                                  options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("set_inactive_stake", p, options)

    @rpc_method
    async def send_sync_set_inactive_stake_transaction(self, p: SetInactiveStakeTxParams,
                                                       options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("set_inactive_stake", p, options)

    @rpc_method
    async def create_unstake_transaction(self, p: UnstakeTxParams,
                                         options: Optional[CallOptions] = None) -> CallResult:
        """Serialized ``remove_stake`` transaction; the fee comes out of the unstaked funds."""
        return await self._create("unstake", p, options)

    @rpc_method
    async def send_unstake_transaction(self, p: UnstakeTxParams,
                                       options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("unstake", p, options)

    @rpc_method
    async def send_sync_unstake_transaction(self, p: UnstakeTxParams,
                                            options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("unstake", p, options)

    # -- Validators -----------------------------------------------------------

    @rpc_method
    async def create_new_validator_transaction(self, p: NewValidatorTxParams,
                                               options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("new_validator", p, options)

    @rpc_method
    async def send_new_validator_transaction(self, p: NewValidatorTxParams,
                                             options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("new_validator", p, options)

    @rpc_method
    async def send_sync_new_validator_transaction(self, p: NewValidatorTxParams,
                                                  options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("new_validator", p, options)

    @rpc_method
    async def create_update_validator_transaction(self, p: UpdateValidatorTxParams,
                                                  options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("update_validator", p, options)

    @rpc_method
    async def send_update_validator_transaction(self, p: UpdateValidatorTxParams,
                                                options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("update_validator", p, options)

    @rpc_method
    async def send_sync_update_validator_transaction(self, p: UpdateValidatorTxParams,
                                                     options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("update_validator", p, options)

    @rpc_method
    async def create_deactivate_validator_transaction(self, p: DeactivateValidatorTxParams,
                                                      options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("deactivate_validator", p, options)

    @rpc_method
    async def send_deactivate_validator_transaction(self, p: DeactivateValidatorTxParams,
                                                    options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("deactivate_validator", p, options)

    @rpc_method
    async def send_sync_deactivate_validator_transaction(self, p: DeactivateValidatorTxParams,
                                                         options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("deactivate_validator", p, options)

    @rpc_method
    async def create_reactivate_validator_transaction(self, p: ReactivateValidatorTxParams,
                                                      options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("reactivate_validator", p, options)

    @rpc_method
    async def send_reactivate_validator_transaction(self, p: ReactivateValidatorTxParams,
                                                    options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("reactivate_validator", p, options)

    @rpc_method
    async def send_sync_reactivate_validator_transaction(self, p: ReactivateValidatorTxParams,
                                                         options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("reactivate_validator", p, options)

    @rpc_method
    async def create_retire_validator_transaction(self, p: RetireValidatorTxParams,
                                                  options: Optional[CallOptions] = None) -> CallResult:
        return await self._create("retire_validator", p, options)

    @rpc_method
    async def send_retire_validator_transaction(self, p: RetireValidatorTxParams,
                                                options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("retire_validator", p, options)

    @rpc_method
    async def send_sync_retire_validator_transaction(self, p: RetireValidatorTxParams,
                                                     options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("retire_validator", p, options)

    @rpc_method
    async def create_delete_validator_transaction(self, p: DeleteValidatorTxParams,
                                                  options: Optional[CallOptions] = None) -> CallResult:
        """Serialized ``delete_validator`` transaction; the deposit goes to ``recipient``."""
        return await self._create("delete_validator", p, options)

    @rpc_method
    async def send_delete_validator_transaction(self, p: DeleteValidatorTxParams,
                                                options: Optional[CallOptions] = None) -> CallResult:
        return await self._send("delete_validator", p, options)

    @rpc_method
    async def send_sync_delete_validator_transaction(self, p: DeleteValidatorTxParams,
                                                     options: Optional[SendTxOptions] = None) -> CallResult:
        return await self._send_sync("delete_validator", p, options)
