from pathlib import Path
import logging
import os

import yaml

# Jormungandr-Tools components
from .cli_tools import JCLI
from .rest_tools import NodeREST

# Setup logging
logger = logging.getLogger(__name__)


def write_secret(path, secret):
    """Write secret material to a file readable by the owner only."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)

    # An existing file keeps its mode through O_CREAT, restrict it before
    # anything is written.
    os.fchmod(fd, 0o600)
    with os.fdopen(fd, "w") as secret_file:
        secret_file.write(secret)


class FaucetError(Exception):
    pass


class StagingExistsError(FaucetError):
    pass


class UsageError(FaucetError):
    pass


class StakePool:
    """Keys and identifiers of a freshly registered stake pool."""

    def __init__(
        self,
        pool_id,
        kes_sk,
        kes_pk,
        vrf_sk,
        vrf_pk,
        leader_sk,
        leader_pk,
        fragment_id=None,
    ):
        self.pool_id = pool_id
        self.kes_sk = kes_sk
        self.kes_pk = kes_pk
        self.vrf_sk = vrf_sk
        self.vrf_pk = vrf_pk
        self.leader_sk = leader_sk
        self.leader_pk = leader_pk
        self.fragment_id = fragment_id

    def node_secret(self):
        """The secret a node needs to produce blocks as this pool."""
        return {
            "genesis": {
                "sig_key": self.kes_sk,
                "vrf_key": self.vrf_sk,
                "node_id": self.pool_id,
            }
        }

    def node_secret_yaml(self):
        return yaml.safe_dump(self.node_secret(), default_flow_style=False)

    def write_node_secret(self, path):
        path = Path(path)
        write_secret(path, self.node_secret_yaml())
        return path


class Faucet:
    """Build and submit certificate transactions paid by a faucet account.

    Parameters
    ----------
    config : FaucetConfig
        Validated faucet configuration.
    jcli : JCLI, optional
        CLI wrapper. Created from the configuration if not given.
    rest : NodeREST, optional
        REST client, only used when the configuration selects the ``http``
        REST client.
    """

    def __init__(self, config, jcli=None, rest=None):
        config.validate()
        self.config = config
        self.jcli = jcli or JCLI(config.cli, config.working_dir)
        if rest is None and config.rest_client == "http":
            rest = NodeREST(config.rest_url)
        self.rest = rest

        # Temporary files are scoped to the process so concurrent runs in
        # the same directory don't collide.
        pid = os.getpid()
        working_dir = Path(config.working_dir)
        self.staging_file = working_dir / f"staging.{pid}.transaction"
        self.witness_secret_file = working_dir / f"witness.secret.{pid}"
        self.witness_output_file = working_dir / f"witness.out.{pid}"
        self.leader_key_file = working_dir / f"leader.{pid}.sk"

    def _check_staging(self):
        if self.staging_file.exists():
            raise StagingExistsError(
                f"Staging file {self.staging_file} already exists."
            )

    def _cleanup_file(self, path):
        path = Path(path)
        if path.exists():
            os.remove(path)

    def get_spending_counter(self, address, public_key):
        if self.config.rest_client == "http":
            account_id = self.jcli.key_to_bytes(public_key)
            return self.rest.get_spending_counter(account_id)
        return self.jcli.rest_account_counter(address, self.config.rest_url)

    def post_message(self, message):
        if self.config.rest_client == "http":
            return self.rest.post_message(message)
        return self.jcli.rest_message_post(message, self.config.rest_url)

    def broadcast_certificate(
        self, certificate, source_sk=None, auth_key_file=None
    ):
        """Submit a certificate in a transaction paid by an account.

        Parameters
        ----------
        certificate : str
            The (signed) certificate in its bech32 text form.
        source_sk : str, optional
            Secret key of the paying account. Defaults to the faucet key.
        auth_key_file : str or Path, optional
            Key file used to authenticate the certificate payload (needed for
            stake pool registrations).

        Returns
        -------
        str
            Fragment id of the submitted transaction.

        Raises
        ------
        StagingExistsError
            If the staging file is already present. It is left untouched.
        """
        self._check_staging()
        if source_sk is None:
            source_sk = self.config.faucet_sk
        staging = self.staging_file

        # Source account
        source_pk = self.jcli.key_to_public(source_sk)
        source_addr = self.jcli.address_account(source_pk, self.config.addr_type)
        logger.info(f"Paying from account {source_addr}")

        counter = self.get_spending_counter(source_addr, source_pk)
        amount = self.config.fees.amount_with_fees()
        logger.info(f"Spending counter {counter}, amount with fees {amount}")

        success = False
        try:
            # Build the transaction
            self.jcli.transaction_new(staging)
            self.jcli.transaction_add_account(source_addr, amount, staging)
            self.jcli.transaction_add_certificate(certificate, staging)
            self.jcli.transaction_finalize(staging)
            witness_data = self.jcli.transaction_data_for_witness(staging)

            # Witness it with the source account key
            write_secret(self.witness_secret_file, source_sk)
            try:
                self.jcli.transaction_make_witness(
                    witness_data,
                    self.config.block0_hash,
                    counter,
                    self.witness_output_file,
                    self.witness_secret_file,
                )
            finally:
                self._cleanup_file(self.witness_secret_file)
            self.jcli.transaction_add_witness(self.witness_output_file, staging)
            self.jcli.transaction_seal(staging)
            if auth_key_file is not None:
                self.jcli.transaction_auth(auth_key_file, staging)
            tx_id = self.jcli.transaction_id(staging)

            # Submit the transaction
            message = self.jcli.transaction_to_message(staging)
            fragment_id = self.post_message(message)
            success = True
        finally:
            if success:
                self._cleanup_file(staging)
                self._cleanup_file(self.witness_output_file)
            else:
                logger.warning(
                    f"Transaction failed, staging file {staging} left in place."
                )

        logger.info(f"Transaction {tx_id} posted as fragment {fragment_id}")
        return fragment_id

    def create_stake_pool(self, leader_sk=None, serial=1010101010):
        """Generate keys for a new stake pool and register it.

        Parameters
        ----------
        leader_sk : str, optional
            Secret key of the pool owner (leader). A new key is generated
            if not given.
        serial : int, optional
            Serial number of the registration certificate.

        Returns
        -------
        StakePool
            The pool keys, pool id and fragment id of the registration.
        """
        self._check_staging()

        # Pool keys
        vrf_sk = self.jcli.key_generate("Curve25519_2HashDH")
        kes_sk = self.jcli.key_generate("SumEd25519_12")
        vrf_pk = self.jcli.key_to_public(vrf_sk)
        kes_pk = self.jcli.key_to_public(kes_sk)

        # Leader (owner) key
        if leader_sk is None:
            leader_sk = self.jcli.key_generate("ed25519")
        leader_pk = self.jcli.key_to_public(leader_sk)

        write_secret(self.leader_key_file, leader_sk)
        try:
            # Registration certificate signed by the owner
            certificate = self.jcli.certificate_new_stake_pool_registration(
                kes_pk, vrf_pk, leader_pk, serial=serial
            )
            signed_certificate = self.jcli.certificate_sign(
                certificate, self.leader_key_file
            )
            pool_id = self.jcli.certificate_get_stake_pool_id(signed_certificate)
            logger.info(f"Registering stake pool {pool_id}")

            fragment_id = self.broadcast_certificate(
                signed_certificate, auth_key_file=self.leader_key_file
            )
        finally:
            self._cleanup_file(self.leader_key_file)

        return StakePool(
            pool_id,
            kes_sk,
            kes_pk,
            vrf_sk,
            vrf_pk,
            leader_sk,
            leader_pk,
            fragment_id=fragment_id,
        )

    def send_certificate(self, certificate_path, source_sk=None):
        """Read a certificate from a file and submit it.

        Raises
        ------
        UsageError
            If the certificate file cannot be read.
        """
        try:
            certificate = Path(certificate_path).read_text(encoding="utf-8")
            certificate = certificate.strip()
        except OSError as e:
            raise UsageError(
                f"Cannot read certificate {certificate_path}: {e.strerror}"
            ) from e
        except UnicodeDecodeError as e:
            raise UsageError(
                f"Certificate {certificate_path} is not a text file."
            ) from e
        if not certificate:
            raise UsageError(f"Certificate file {certificate_path} is empty.")
        return self.broadcast_certificate(certificate, source_sk=source_sk)
