"""
Albatross validator RPC Methods

Only meaningful against a node running as a validator.
"""

from typing import Optional

from ..rpc.messages import CallOptions, CallResult
from .base import RPCModule, rpc_method


class ValidatorModule(RPCModule):
    """
    Validator RPC methods.
    """

    namespace = "validator"

    @rpc_method
    async def get_address(self, options: Optional[CallOptions] = None) -> CallResult:
        """Address of the validator the node runs."""
        return await self._call("getAddress", options=options)

    @rpc_method
    async def get_signing_key(self, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getSigningKey", options=options)

    @rpc_method
    async def get_voting_key(self, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("getVotingKey", options=options)

    @rpc_method
    async def set_automatic_reactivation(self, automatic_reactivation: bool,
                                         options: Optional[CallOptions] = None) -> CallResult:
        """Reactivate the validator automatically after it gets deactivated."""
        return await self._call("setAutomaticReactivation", [automatic_reactivation], options=options)

    @rpc_method
    async def is_elected(self, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("isValidatorElected", options=options)

    @rpc_method
    async def is_synced(self, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("isValidatorSynced", options=options)
