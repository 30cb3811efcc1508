"""Console entry points for the faucet flows.

    jormungandr-create-stakepool [--config FILE] [LEADER_SK]
    jormungandr-send-certificate [--config FILE] CERTIFICATE [SOURCE_SK]

Exit codes: 0 on success, 1 on usage or configuration errors, 2 when the
staging file already exists. A failing jcli command exits with the status of
that command.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# Jormungandr-Tools components
from .cli_tools import JCLIError
from .config import ConfigError, FaucetConfig
from .faucet import Faucet, StagingExistsError, UsageError
from .rest_tools import NodeREST, NodeRESTError

logger = logging.getLogger(__name__)

EXIT_USAGE = 1
EXIT_STAGING_EXISTS = 2

GREEN = "\033[1;32m"
BLUE = "\033[1;34m"
RESET = "\033[0m"


class ArgumentParser(argparse.ArgumentParser):
    """Parser reporting usage errors with exit status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


class Console:
    def __init__(self, colors=False, stream=None):
        self.colors = colors
        self.stream = stream or sys.stdout

    def heading(self, text):
        if self.colors:
            text = f"{GREEN}{text}{RESET}"
        print(f"## {text}", file=self.stream)

    def value(self, name, value):
        if self.colors:
            value = f"{BLUE}{value}{RESET}"
        print(f"{name}: {value}", file=self.stream)

    def text(self, text):
        print(text, file=self.stream)


def _common_arguments(parser):
    parser.add_argument(
        "-c",
        "--config",
        help="YAML configuration file (environment variables override it)",
    )
    parser.add_argument(
        "--node-settings",
        action="store_true",
        help="take the genesis hash and fees from the node REST settings",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log debug messages"
    )


def _setup_logging(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _load_config(args):
    config = FaucetConfig.load(args.config)
    if args.node_settings:
        if not config.rest_url:
            raise ConfigError("Missing configuration values: rest_url")
        config.update_from_node(NodeREST(config.rest_url))
    return config


def _check_writable(path):
    """Fail before anything is registered if a file can't be created."""
    path = Path(path)
    directory = path.parent
    if path.is_dir():
        raise UsageError(f"{path} is a directory.")
    if not directory.is_dir():
        raise UsageError(f"Directory {directory} does not exist.")
    target = path if path.exists() else directory
    if not os.access(target, os.W_OK):
        raise UsageError(f"{path} is not writable.")


def _run(parser, args, flow):
    """Run a faucet flow and translate its errors into exit statuses."""
    try:
        config = _load_config(args)
        faucet = Faucet(config)
        flow(faucet, Console(config.colors))
    except UsageError as e:
        parser.print_usage(sys.stderr)
        logger.error(e)
        return EXIT_USAGE
    except (ConfigError, OSError) as e:
        logger.error(e)
        return EXIT_USAGE
    except StagingExistsError as e:
        logger.error(e)
        return EXIT_STAGING_EXISTS
    except JCLIError as e:
        logger.error(e)
        return e.returncode if e.returncode > 0 else 1
    except NodeRESTError as e:
        logger.error(e)
        return 1
    return 0


def create_stakepool(argv=None):
    parser = ArgumentParser(
        prog="jormungandr-create-stakepool",
        description="Register a new stake pool, paid by the faucet account.",
    )
    _common_arguments(parser)
    parser.add_argument(
        "--secret-out",
        help="write the node secret of the pool to this YAML file",
    )
    parser.add_argument(
        "leader_sk",
        nargs="?",
        metavar="LEADER_SK",
        help="secret key of the pool owner (generated if omitted)",
    )
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    def flow(faucet, console):
        if args.secret_out:
            _check_writable(args.secret_out)
        pool = faucet.create_stake_pool(leader_sk=args.leader_sk)
        console.heading("Stake pool registered")
        console.value("pool id", pool.pool_id)
        console.value("fragment id", pool.fragment_id)
        console.value("leader public key", pool.leader_pk)
        if args.secret_out:
            try:
                path = pool.write_node_secret(args.secret_out)
            except OSError:
                # The pool is already registered, its keys exist only here.
                console.heading("Node secret (could not be written, save it)")
                console.text(pool.node_secret_yaml())
                raise
            console.heading(f"Node secret written to {path}")
        else:
            console.heading("Node secret (save it as the node secret file)")
            console.text(pool.node_secret_yaml())

    return _run(parser, args, flow)


def send_certificate(argv=None):
    parser = ArgumentParser(
        prog="jormungandr-send-certificate",
        description="Send a signed certificate, paid by the faucet account.",
    )
    _common_arguments(parser)
    parser.add_argument(
        "certificate", metavar="CERTIFICATE", help="path to the certificate"
    )
    parser.add_argument(
        "source_sk",
        nargs="?",
        metavar="SOURCE_SK",
        help="secret key of the paying account (faucet if omitted)",
    )
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    def flow(faucet, console):
        fragment_id = faucet.send_certificate(
            args.certificate, source_sk=args.source_sk
        )
        console.heading("Certificate sent")
        console.value("fragment id", fragment_id)

    return _run(parser, args, flow)


def main_create_stakepool():
    sys.exit(create_stakepool())


def main_send_certificate():
    sys.exit(send_certificate())
