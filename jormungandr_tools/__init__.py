from .cli_tools import JCLI, JCLIError
from .config import ConfigError, FaucetConfig, render_template
from .faucet import Faucet, FaucetError, StagingExistsError, StakePool, UsageError
from .fees import LinearFee
from .rest_tools import NodeREST, NodeRESTError

__version__ = "1.0.0"

__all__ = [
    "JCLI",
    "JCLIError",
    "ConfigError",
    "FaucetConfig",
    "render_template",
    "Faucet",
    "FaucetError",
    "StagingExistsError",
    "StakePool",
    "UsageError",
    "LinearFee",
    "NodeREST",
    "NodeRESTError",
]
