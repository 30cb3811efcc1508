import subprocess
from pathlib import Path

import pytest

from jormungandr_tools import FaucetConfig, LinearFee


class FakeJCLI:
    """Stand-in for the jcli binary. Records every command and answers with
    predictable outputs, touching the staging and witness files the way the
    real CLI does.
    """

    def __init__(self):
        self.calls = []
        self.fail_on = None
        self.fail_code = 3
        self.counter = 7
        self.secrets_seen = []
        self.keys_generated = 0
        self.account_output = None

    def commands(self):
        return [" ".join(argv[1:3]) for argv, _ in self.calls]

    def _staging(self, argv):
        return Path(argv[argv.index("--staging") + 1])

    def __call__(self, argv, input=None, capture_output=False, text=False):
        self.calls.append((argv, input))
        command = " ".join(argv[1:3])
        if self.fail_on is not None and command == self.fail_on:
            return subprocess.CompletedProcess(
                argv, self.fail_code, stdout="", stderr=f"{command} failed"
            )
        stdout = self.respond(command, argv, input)
        return subprocess.CompletedProcess(argv, 0, stdout=f"{stdout}\n", stderr="")

    def respond(self, command, argv, stdin):
        if command == "key generate":
            self.keys_generated += 1
            key_type = argv[3].split("=")[1]
            return f"{key_type}_sk{self.keys_generated}"
        if command == "key to-public":
            return stdin.replace("_sk", "_pk")
        if command == "key to-bytes":
            return "deadbeef"
        if command == "address account":
            return f"ta1{argv[-1]}"
        if command == "address single":
            return f"ta1s{argv[-1]}"
        if command == "certificate new":
            return "cert1registration"
        if command == "certificate sign":
            assert Path(argv[3]).exists()
            return f"signed{stdin}"
        if command == "certificate get-stake-pool-id":
            return "pool0123"
        if command == "transaction new":
            self._staging(argv).write_text("new\n")
            return ""
        if command == "transaction make-witness":
            out_file, secret_file = Path(argv[-2]), Path(argv[-1])
            self.secrets_seen.append(secret_file.read_text())
            out_file.write_text("witness")
            return ""
        if command.startswith("transaction"):
            staging = self._staging(argv)
            with open(staging, "a") as staging_file:
                staging_file.write(f"{argv[2]}\n")
            if command == "transaction data-for-witness":
                return "txid0"
            if command == "transaction id":
                return "txid1"
            if command == "transaction to-message":
                return "0a0b0c"
            return ""
        if command == "rest v0":
            if argv[3:5] == ["account", "get"]:
                if self.account_output is not None:
                    return self.account_output
                return f"---\ncounter: {self.counter}\nvalue: 100000\n"
            if argv[3:5] == ["message", "post"]:
                return "fragment0"
        if command == "--version":
            return "jcli 0.8.0"
        raise AssertionError(f"Unexpected jcli command: {argv}")


@pytest.fixture
def fake_jcli(monkeypatch):
    fake = FakeJCLI()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def working_dir(tmp_path) -> Path:
    return tmp_path


@pytest.fixture
def fees() -> LinearFee:
    return LinearFee(constant=10, coefficient=2, certificate=100)


@pytest.fixture
def config(working_dir, fees) -> FaucetConfig:
    return FaucetConfig(
        cli="jcli",
        rest_url="http://127.0.0.1:8443/api",
        block0_hash="block0hash",
        faucet_sk="faucet_sk",
        fees=fees,
        addr_type="--testing",
        working_dir=working_dir,
    )


@pytest.fixture
def config_env(monkeypatch, working_dir):
    """Environment configuration picked up by the console entry points."""
    values = {
        "JCLI_PATH": "jcli",
        "JORMUNGANDR_REST_URL": "http://127.0.0.1:8443/api",
        "JORMUNGANDR_BLOCK0_HASH": "block0hash",
        "JORMUNGANDR_ADDRTYPE": "--testing",
        "JORMUNGANDR_FAUCET_SK": "faucet_sk",
        "JORMUNGANDR_FEE_CONSTANT": "10",
        "JORMUNGANDR_FEE_COEFFICIENT": "2",
        "JORMUNGANDR_FEE_CERTIFICATE": "100",
        "JORMUNGANDR_WORKING_DIR": str(working_dir),
    }
    for var, value in values.items():
        monkeypatch.setenv(var, value)
    return values
