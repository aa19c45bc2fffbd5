"""
Albatross RPC Client Package

Core imports are lazily loaded so that importing a submodule does not pull
in both transports. Typical use:

    from albatross_rpc import Client, Auth
    from albatross_rpc.rpc import CallOptions, StreamOptions
"""

__version__ = "0.1.0"


# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'Client':
        from .client import Client
        return Client
    elif name == 'Auth':
        from .types import Auth
        return Auth
    elif name == 'ClientConfig':
        from .config import ClientConfig
        return ClientConfig
    elif name == 'load_config':
        from .config import load_config
        return load_config
    elif name in ('CallOptions', 'CallResult', 'RPCError', 'RPCErrorCode', 'SendTxOptions', 'StreamMessage',
                  'SubscriptionError'):
        from .rpc import messages
        return getattr(messages, name)
    elif name in ('StreamOptions', 'Subscription'):
        from .rpc import websocket
        return getattr(websocket, name)
    raise AttributeError(f"module 'albatross_rpc' has no attribute {name!r}")

__all__ = [
    'Client', 'Auth', 'ClientConfig', 'load_config',
    'CallOptions', 'CallResult', 'RPCError', 'RPCErrorCode', 'SendTxOptions', 'StreamMessage',
    'SubscriptionError', 'StreamOptions', 'Subscription',
]
