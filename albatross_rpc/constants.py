"""
Albatross RPC Client Constants

This module consolidates the protocol constants and the environment
configuration used throughout the client. Values read from ``.env`` override
the defaults below.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

NODE_DEFAULTS = {
    'ALBATROSS_RPC_NODE_URL':          '',
    'ALBATROSS_RPC_NODE_USERNAME':     '',
    'ALBATROSS_RPC_NODE_PASSWORD':     '',
    'ALBATROSS_RPC_NODE_SECRET':       '',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_AUTO_CONFIGURE':              'False',
    'LOG_FILE':                        '',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# PROTOCOL CONSTANTS
# ==================================================================================
JSONRPC_VERSION = '2.0'
WS_PATH = '/ws'

# Request / subscription timeouts (seconds)
DEFAULT_TIMEOUT = 10.0
DEFAULT_SUBSCRIBE_TIMEOUT = 30.0
DEFAULT_TIMEOUT_CONFIRMATION = 10.0
DEFAULT_OPEN_TIMEOUT = 10.0
DEFAULT_PING_INTERVAL = 20.0

# Names of the environment variables the client reads at runtime
URL_ENV_NAME = 'ALBATROSS_RPC_NODE_URL'
USERNAME_ENV_NAME = 'ALBATROSS_RPC_NODE_USERNAME'
PASSWORD_ENV_NAME = 'ALBATROSS_RPC_NODE_PASSWORD'
SECRET_ENV_NAME = 'ALBATROSS_RPC_NODE_SECRET'
CONFIG_ENV_NAME = 'ALBATROSS_RPC_CONFIG'
DEFAULT_CONFIG_PATH = 'albatross.toml'


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = NODE_DEFAULTS | LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    # Case-insensitive membership check
    if s.casefold() in {"true", "false"}:
        # ast.literal_eval expects "True"/"False"
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    # Parses only boolean-literals. Leaves other values untouched.
    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    # Wraps based on parsed value type.
    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        # Preserves the original raw string for ConfigString storage.
        namespace[key] = ConfigString(value_raw, default_val)
