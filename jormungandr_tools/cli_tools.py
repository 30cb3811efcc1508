from pathlib import Path
import logging
import shlex
import subprocess

import yaml

# Setup logging
logger = logging.getLogger(__name__)


class JCLIError(Exception):
    def __init__(self, cmd, returncode, stderr):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command '{cmd}' failed with exit status {returncode}: {stderr}"
        )


class JCLI:
    """Wrapper around the jormungandr command line interface (jcli).

    Every method runs a single jcli command and returns its output as a
    stripped string. Secret material is always passed on stdin or through a
    file, never on the command line.
    """

    def __init__(self, path_to_cli="jcli", working_dir="."):

        # Set the path to the CLI. The binary is only executed when a command
        # is run so a missing CLI is reported by the first call.
        self.cli = path_to_cli

        # Set the working directory. Create the path if it doesn't exist.
        self.working_dir = Path(working_dir)
        self.working_dir.mkdir(parents=True, exist_ok=True)

    def run_cli(self, cmd, stdin=None):
        """Execute a jcli command and return its standard output.

        Parameters
        ----------
        cmd : str
            The full command, starting with the path to the CLI.
        stdin : str, optional
            Text piped to the command's standard input.

        Returns
        -------
        str
            The stripped standard output of the command.

        Raises
        ------
        JCLIError
            If the command exits with a non-zero status.
        """
        logger.debug(f"Running: {cmd}")
        result = subprocess.run(
            shlex.split(cmd), input=stdin, capture_output=True, text=True
        )
        if result.returncode != 0:
            raise JCLIError(cmd, result.returncode, result.stderr.strip())
        return result.stdout.strip()

    def version(self):
        return self.run_cli(f"{self.cli} --version")

    # Keys and addresses

    def key_generate(self, key_type="ed25519"):
        """Generate a secret key of the given type (ed25519,
        Curve25519_2HashDH for VRF, SumEd25519_12 for KES).
        """
        return self.run_cli(f"{self.cli} key generate --type={key_type}")

    def key_to_public(self, secret_key):
        return self.run_cli(f"{self.cli} key to-public", stdin=secret_key)

    def key_to_bytes(self, key):
        """Hex encoding of a bech32 key, used as the account identifier in
        the REST API.
        """
        return self.run_cli(f"{self.cli} key to-bytes", stdin=key)

    def address_account(self, public_key, addr_type=""):
        return self.run_cli(
            f"{self.cli} address account {addr_type} {public_key}"
        )

    def address_single(self, public_key, addr_type=""):
        return self.run_cli(
            f"{self.cli} address single {addr_type} {public_key}"
        )

    # Certificates

    def certificate_new_stake_pool_registration(
        self,
        kes_pk,
        vrf_pk,
        owner_pk,
        serial=1010101010,
        start_validity=0,
        management_threshold=1,
    ):
        """Create an unsigned stake pool registration certificate owned by a
        single key.
        """
        return self.run_cli(
            f"{self.cli} certificate new stake-pool-registration "
            f"--kes-key {kes_pk} --vrf-key {vrf_pk} --owner {owner_pk} "
            f"--serial {serial} --start-validity {start_validity} "
            f"--management-threshold {management_threshold}"
        )

    def certificate_sign(self, certificate, key_file):
        return self.run_cli(
            f'{self.cli} certificate sign "{key_file}"', stdin=certificate
        )

    def certificate_get_stake_pool_id(self, signed_certificate):
        return self.run_cli(
            f"{self.cli} certificate get-stake-pool-id",
            stdin=signed_certificate,
        )

    # Staged transactions

    def transaction_new(self, staging):
        self.run_cli(f'{self.cli} transaction new --staging "{staging}"')

    def transaction_add_account(self, address, amount, staging):
        self.run_cli(
            f"{self.cli} transaction add-account {address} {amount} "
            f'--staging "{staging}"'
        )

    def transaction_add_certificate(self, certificate, staging):
        self.run_cli(
            f"{self.cli} transaction add-certificate {certificate} "
            f'--staging "{staging}"'
        )

    def transaction_finalize(self, staging):
        self.run_cli(f'{self.cli} transaction finalize --staging "{staging}"')

    def transaction_data_for_witness(self, staging):
        return self.run_cli(
            f'{self.cli} transaction data-for-witness --staging "{staging}"'
        )

    def transaction_id(self, staging):
        return self.run_cli(f'{self.cli} transaction id --staging "{staging}"')

    def transaction_make_witness(
        self, witness_data, block0_hash, spending_counter, out_file, secret_file
    ):
        """Create an account witness for the transaction data.

        Parameters
        ----------
        witness_data : str
            The transaction data to witness (output of data-for-witness).
        block0_hash : str
            Hash of the genesis block of the blockchain.
        spending_counter : int
            Current spending counter of the witnessing account.
        out_file : str or Path
            File the witness is written to.
        secret_file : str or Path
            File holding the account's secret key.
        """
        self.run_cli(
            f"{self.cli} transaction make-witness {witness_data} "
            f"--genesis-block-hash {block0_hash} --type account "
            f"--account-spending-counter {spending_counter} "
            f'"{out_file}" "{secret_file}"'
        )

    def transaction_add_witness(self, witness_file, staging):
        self.run_cli(
            f'{self.cli} transaction add-witness "{witness_file}" '
            f'--staging "{staging}"'
        )

    def transaction_seal(self, staging):
        self.run_cli(f'{self.cli} transaction seal --staging "{staging}"')

    def transaction_auth(self, key_file, staging):
        self.run_cli(
            f'{self.cli} transaction auth -k "{key_file}" '
            f'--staging "{staging}"'
        )

    def transaction_to_message(self, staging):
        return self.run_cli(
            f'{self.cli} transaction to-message --staging "{staging}"'
        )

    # REST subcommands

    def rest_account_get(self, address, rest_url):
        """Query the state of an account from the node. The YAML printed by
        the CLI is returned as a dict.
        """
        cmd = f"{self.cli} rest v0 account get {address} -h {rest_url}"
        output = self.run_cli(cmd)
        try:
            state = yaml.safe_load(output)
        except yaml.YAMLError:
            state = None
        if not isinstance(state, dict):
            raise JCLIError(cmd, 1, f"Unexpected account state: {output!r}")
        return state

    def rest_account_counter(self, address, rest_url):
        state = self.rest_account_get(address, rest_url)
        if "counter" in state:
            return int(state["counter"])

        # Newer nodes report one counter per spending lane.
        counters = state.get("counters") or [0]
        return int(counters[0])

    def rest_message_post(self, message, rest_url):
        """Post a hex encoded transaction message and return the fragment
        id reported by the node.
        """
        return self.run_cli(
            f"{self.cli} rest v0 message post -h {rest_url}", stdin=message
        )
