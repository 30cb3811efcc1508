from pathlib import Path
import logging
import os

import yaml

from .fees import LinearFee

# Setup logging
logger = logging.getLogger(__name__)

# Environment variables read by FaucetConfig.from_env, mapped to the
# configuration keys they set.
ENV_VARS = {
    "JCLI_PATH": "cli",
    "JORMUNGANDR_REST_URL": "rest_url",
    "JORMUNGANDR_BLOCK0_HASH": "block0_hash",
    "JORMUNGANDR_ADDRTYPE": "addr_type",
    "JORMUNGANDR_FAUCET_SK": "faucet_sk",
    "JORMUNGANDR_COLORS": "colors",
    "JORMUNGANDR_WORKING_DIR": "working_dir",
    "JORMUNGANDR_REST_CLIENT": "rest_client",
    "JORMUNGANDR_FEE_CONSTANT": "fee_constant",
    "JORMUNGANDR_FEE_COEFFICIENT": "fee_coefficient",
    "JORMUNGANDR_FEE_CERTIFICATE": "fee_certificate",
}

KEYS = (
    "cli",
    "rest_url",
    "block0_hash",
    "faucet_sk",
    "addr_type",
    "colors",
    "working_dir",
    "rest_client",
)

REQUIRED = ("cli", "rest_url", "block0_hash", "faucet_sk")

REST_CLIENTS = ("cli", "http")


class ConfigError(Exception):
    pass


def _read_yaml(path):
    with open(path, "r") as config_file:
        try:
            values = yaml.safe_load(config_file) or {}
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Configuration file {path} is not valid YAML: {e}"
            ) from e
    if not isinstance(values, dict):
        raise ConfigError(f"Configuration file {path} is not a mapping.")
    return values


def _to_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class FaucetConfig:
    """Settings shared by the faucet flows.

    Parameters
    ----------
    cli : str
        Path to the jcli binary.
    rest_url : str
        URL of the node REST API, e.g. http://127.0.0.1:8443/api.
    block0_hash : str
        Hash of the genesis block.
    faucet_sk : str
        Secret key of the pre-funded faucet account.
    fees : LinearFee, optional
        Fee schedule of the blockchain.
    addr_type : str, optional
        Address discrimination flag passed to jcli (``--testing`` or empty).
    colors : bool, optional
        Use ANSI colors in console output.
    working_dir : str or Path, optional
        Where staging and temporary files are created.
    rest_client : str, optional
        ``cli`` to talk to the node through ``jcli rest``, ``http`` to call
        the REST API directly.
    """

    def __init__(
        self,
        cli="jcli",
        rest_url=None,
        block0_hash=None,
        faucet_sk=None,
        fees=None,
        addr_type="--testing",
        colors=False,
        working_dir=".",
        rest_client="cli",
    ):
        self.cli = cli
        self.rest_url = rest_url
        self.block0_hash = block0_hash
        self.faucet_sk = faucet_sk
        self.fees = fees if fees is not None else LinearFee()
        self.addr_type = addr_type or ""
        self.colors = _to_bool(colors)
        self.working_dir = Path(working_dir)
        self.rest_client = rest_client

    @classmethod
    def from_dict(cls, values):
        values = dict(values)
        fees = values.pop("fees", None) or {}
        if not isinstance(fees, dict):
            raise ConfigError("Configuration value fees is not a mapping.")
        fees = dict(fees)
        for name in ("constant", "coefficient", "certificate"):
            if f"fee_{name}" in values:
                fees[name] = values.pop(f"fee_{name}")
        unknown = set(values) - set(KEYS)
        if unknown:
            raise ConfigError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )
        try:
            fee_schedule = LinearFee.from_dict(fees)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid fee schedule: {e}") from e
        return cls(fees=fee_schedule, **values)

    @classmethod
    def from_file(cls, path):
        """Load the configuration from a YAML file."""
        return cls.from_dict(_read_yaml(path))

    @classmethod
    def from_env(cls, environ=None, base=None):
        """Load the configuration from environment variables, on top of an
        optional mapping of values (e.g. read from a file).
        """
        if environ is None:
            environ = os.environ
        values = dict(base or {})
        for var, key in ENV_VARS.items():
            if var in environ:
                values[key] = environ[var]
        return cls.from_dict(values)

    @classmethod
    def load(cls, path=None, environ=None):
        """Read the optional configuration file, then apply environment
        overrides.
        """
        base = _read_yaml(path) if path is not None else {}
        return cls.from_env(environ=environ, base=base)

    def update_from_node(self, rest):
        """Fill the genesis hash and fee schedule from the node settings.

        Parameters
        ----------
        rest : NodeREST
            Client connected to the node.
        """
        settings = rest.get_settings()
        if not isinstance(settings, dict) or "block0Hash" not in settings:
            raise ConfigError("Node settings have no block0Hash.")
        fees = settings.get("fees") or {}
        if not isinstance(fees, dict):
            raise ConfigError("Node settings fees is not a mapping.")
        try:
            fee_schedule = LinearFee.from_dict(fees)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid node fee schedule: {e}") from e
        self.block0_hash = settings["block0Hash"]
        self.fees = fee_schedule
        logger.info(
            f"Using node settings: block0 {self.block0_hash}, {self.fees}"
        )

    def validate(self):
        missing = [key for key in REQUIRED if not getattr(self, key)]
        if missing:
            raise ConfigError(
                f"Missing configuration values: {', '.join(missing)}"
            )
        if self.rest_client not in REST_CLIENTS:
            raise ConfigError(
                f"Invalid REST client '{self.rest_client}', expected one of "
                f"{', '.join(REST_CLIENTS)}."
            )
        if self.addr_type not in ("", "--testing"):
            raise ConfigError(f"Invalid address type '{self.addr_type}'.")

    def template_values(self):
        """Values substituted for the ``####TOKEN####`` placeholders of the
        bootstrap shell templates.
        """
        return {
            "CLI": self.cli,
            "COLORS": "1" if self.colors else "0",
            "ADDRTYPE": self.addr_type,
            "REST_URL": self.rest_url or "",
            "BLOCK0_HASH": self.block0_hash or "",
            "FEE_CONSTANT": str(self.fees.constant),
            "FEE_CERTIFICATE": str(self.fees.certificate),
            "FEE_COEFFICIENT": str(self.fees.coefficient),
            "FAUCET_SK": self.faucet_sk or "",
        }


def render_template(text, config):
    """Substitute the configuration into a script template. Placeholders
    that are not known are left untouched.
    """
    for token, value in config.template_values().items():
        text = text.replace(f"####{token}####", value)
    return text
