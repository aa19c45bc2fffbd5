"""
Albatross RPC Types

Enumerations shared by the method groups and the `Auth` credentials that
produce the pre-built headers both channels send.
"""

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .exceptions import ConfigurationError


class BlockType(str, Enum):
    MICRO = "micro"
    MACRO = "macro"


class BlockSubscriptionType(str, Enum):
    """Block kinds a head-block stream can be narrowed to."""
    MACRO = "macro"
    MICRO = "micro"
    ELECTION = "election"


class RetrieveType(str, Enum):
    """How much of a block a stream retrieves."""
    FULL = "full"
    PARTIAL = "partial"
    HASH = "hash"


class AccountType(str, Enum):
    BASIC = "basic"
    VESTING = "vesting"
    HTLC = "htlc"
    STAKING = "staking"


class LogType(str, Enum):
    """Event log types emitted by the node."""
    PAY_FEE = "pay-fee"
    TRANSFER = "transfer"
    HTLC_CREATE = "htlc-create"
    HTLC_TIMEOUT_RESOLVE = "htlc-timeout-resolve"
    HTLC_REGULAR_TRANSFER = "htlc-regular-transfer"
    HTLC_EARLY_RESOLVE = "htlc-early-resolve"
    VESTING_CREATE = "vesting-create"
    CREATE_VALIDATOR = "create-validator"
    UPDATE_VALIDATOR = "update-validator"
    VALIDATOR_FEE_DEDUCTION = "validator-fee-deduction"
    DEACTIVATE_VALIDATOR = "deactivate-validator"
    REACTIVATE_VALIDATOR = "reactivate-validator"
    RETIRE_VALIDATOR = "retire-validator"
    DELETE_VALIDATOR = "delete-validator"
    CREATE_STAKER = "create-staker"
    STAKE = "stake"
    UPDATE_STAKER = "update-staker"
    SET_ACTIVE_STAKE = "set-active-stake"
    RETIRE_STAKE = "retire-stake"
    REMOVE_STAKE = "remove-stake"
    DELETE_STAKER = "delete-staker"
    STAKER_FEE_DEDUCTION = "staker-fee-deduction"
    PAYOUT_REWARD = "payout-reward"
    PENALIZE = "penalize"
    JAIL_VALIDATOR = "jail-validator"
    REVERT_CONTRACT = "revert-contract"
    FAILED_TRANSACTION = "failed-transaction"


@dataclass(frozen=True)
class Auth:
    """
    Node credentials: either basic auth (username + password) or a bearer
    secret. Only `headers()` is seen by the channels.
    """
    username: Optional[str] = None
    password: Optional[str] = None
    secret: Optional[str] = None

    def __post_init__(self):
        basic = bool(self.username) or bool(self.password)
        if basic and self.secret:
            raise ConfigurationError("Auth takes either username/password or secret, not both")
        if basic and not (self.username and self.password):
            raise ConfigurationError("Basic auth requires both username and password")

    def headers(self) -> Dict[str, str]:
        if self.secret:
            return {"Authorization": f"Bearer {self.secret}"}
        if self.username and self.password:
            token = base64.b64encode(f"{self.username}:{self.password}".encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {token}"}
        return {}
