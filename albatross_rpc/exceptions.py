"""
Albatross RPC Exceptions

Custom exception classes for the Albatross RPC client.
"""


class AlbatrossRPCException(Exception):
    """Base exception for the Albatross RPC client."""
    pass


class ConfigurationError(AlbatrossRPCException):
    """Client configuration is invalid."""
    pass


class ClientNotInitializedError(ConfigurationError):
    """No node URL was given and none could be found in the environment."""
    pass


class TransportNotReadyError(AlbatrossRPCException):
    """A frame was written to a streaming transport that is not open."""
    pass


class InvalidParamsError(AlbatrossRPCException, ValueError):
    """Method parameters failed validation before the request was built."""
    pass
