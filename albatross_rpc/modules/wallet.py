"""
Albatross wallet RPC Methods

Key management inside the node's own wallet. Passphrases are sent to the
node as-is, so only use these against a node reached over a trusted
connection.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..rpc.messages import CallOptions, CallResult
from .base import RPCModule, require, rpc_method


@dataclass
class ImportKeyParams:
    key_data: str = field(repr=False)
    passphrase: Optional[str] = field(default=None, repr=False)

    def to_params(self) -> List[Any]:
        require(self.key_data, "key_data")
        return [self.key_data, self.passphrase]


@dataclass
class UnlockAccountParams:
    passphrase: Optional[str] = field(default=None, repr=False)
    # Seconds; None keeps the account unlocked until locked again
    duration: Optional[int] = None


@dataclass
class SignParams:
    message: str
    address: str
    passphrase: Optional[str] = field(default=None, repr=False)
    is_hex: bool = False

    def to_params(self) -> List[Any]:
        require(self.message, "message")
        require(self.address, "address")
        return [self.message, self.address, self.passphrase, self.is_hex]


@dataclass
class VerifySignatureParams:
    message: str
    public_key: str
    signature: Any
    is_hex: bool = False

    def to_params(self) -> List[Any]:
        require(self.message, "message")
        require(self.public_key, "public_key")
        require(self.signature, "signature")
        return [self.message, self.public_key, self.signature, self.is_hex]


class WalletModule(RPCModule):
    """
    Wallet RPC methods.
    """

    namespace = "wallet"

    @rpc_method
    async def import_raw_key(self, p: ImportKeyParams, options: Optional[CallOptions] = None) -> CallResult:
        """Imports a private key; returns the account address."""
        return await self._call("importRawKey", p, options=options)

    @rpc_method
    async def is_account_imported(self, address: str, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("isAccountImported", [address], options=options)

    @rpc_method
    async def list_accounts(self, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("listAccounts", options=options)

    @rpc_method
    async def lock_account(self, address: str, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("lockAccount", [address], options=options)

    @rpc_method
    async def create_account(self, passphrase: Optional[str] = None,
                             options: Optional[CallOptions] = None) -> CallResult:
        """Creates a new account; returns its address and keys."""
        return await self._call("createAccount", [passphrase], options=options)

    @rpc_method
    async def unlock_account(self, address: str, p: Optional[UnlockAccountParams] = None,
                             options: Optional[CallOptions] = None) -> CallResult:
        p = p or UnlockAccountParams()
        return await self._call("unlockAccount", [address, p.passphrase, p.duration], options=options)

    @rpc_method
    async def is_account_unlocked(self, address: str, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("isAccountUnlocked", [address], options=options)

    @rpc_method
    async def sign(self, p: SignParams, options: Optional[CallOptions] = None) -> CallResult:
        """Signs a message with an unlocked (or passphrase-unlocked) account."""
        return await self._call("sign", p, options=options)

    @rpc_method
    async def verify_signature(self, p: VerifySignatureParams, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("verifySignature", p, options=options)

    @rpc_method
    async def remove_account(self, address: str, options: Optional[CallOptions] = None) -> CallResult:
        return await self._call("removeAccount", [address], options=options)
