import pytest

from jormungandr_tools import JCLI, JCLIError


@pytest.fixture
def jcli(fake_jcli, working_dir) -> JCLI:
    return JCLI("jcli", working_dir)


def test_version(jcli):
    assert jcli.version() == "jcli 0.8.0"


def test_key_generate(jcli, fake_jcli):
    assert jcli.key_generate("SumEd25519_12") == "SumEd25519_12_sk1"
    assert fake_jcli.calls[-1][0] == ["jcli", "key", "generate", "--type=SumEd25519_12"]


def test_secret_key_on_stdin(jcli, fake_jcli):
    assert jcli.key_to_public("ed25519_sk9") == "ed25519_pk9"
    argv, stdin = fake_jcli.calls[-1]
    assert "ed25519_sk9" not in argv
    assert stdin == "ed25519_sk9"


def test_address_account(jcli, fake_jcli):
    assert jcli.address_account("ed25519_pk1", "--testing") == "ta1ed25519_pk1"
    assert fake_jcli.calls[-1][0] == [
        "jcli", "address", "account", "--testing", "ed25519_pk1",
    ]
    jcli.address_account("ed25519_pk1")
    assert fake_jcli.calls[-1][0] == ["jcli", "address", "account", "ed25519_pk1"]


def test_stake_pool_registration(jcli, fake_jcli):
    cert = jcli.certificate_new_stake_pool_registration("kes_pk", "vrf_pk", "owner_pk")
    assert cert == "cert1registration"
    argv = fake_jcli.calls[-1][0]
    assert argv[argv.index("--kes-key") + 1] == "kes_pk"
    assert argv[argv.index("--vrf-key") + 1] == "vrf_pk"
    assert argv[argv.index("--owner") + 1] == "owner_pk"
    assert argv[argv.index("--serial") + 1] == "1010101010"
    assert argv[argv.index("--management-threshold") + 1] == "1"


def test_staging_path_with_spaces(jcli, fake_jcli, working_dir):
    staging = working_dir / "my dir" / "staging.1.transaction"
    staging.parent.mkdir()
    jcli.transaction_new(staging)
    assert fake_jcli.calls[-1][0][-1] == str(staging)
    assert staging.exists()


def test_rest_account_counter(jcli, fake_jcli):
    fake_jcli.counter = 42
    assert jcli.rest_account_counter("ta1abc", "http://node/api") == 42
    assert fake_jcli.calls[-1][0] == [
        "jcli", "rest", "v0", "account", "get", "ta1abc", "-h", "http://node/api",
    ]


def test_rest_account_counters(jcli, monkeypatch):
    monkeypatch.setattr(
        jcli, "rest_account_get", lambda address, rest_url: {"counters": [3, 0, 0]}
    )
    assert jcli.rest_account_counter("ta1abc", "http://node/api") == 3


def test_rest_message_post(jcli, fake_jcli):
    assert jcli.rest_message_post("0a0b0c", "http://node/api") == "fragment0"
    assert fake_jcli.calls[-1][1] == "0a0b0c"


def test_failure_raises(jcli, fake_jcli):
    fake_jcli.fail_on = "transaction seal"
    fake_jcli.fail_code = 5
    with pytest.raises(JCLIError) as exc_info:
        jcli.transaction_seal("staging")
    assert exc_info.value.returncode == 5
    assert exc_info.value.stderr == "transaction seal failed"
    assert "transaction seal" in exc_info.value.cmd


def test_address_single(jcli, fake_jcli):
    assert jcli.address_single("ed25519_pk1", "--testing") == "ta1sed25519_pk1"
    assert fake_jcli.calls[-1][0] == [
        "jcli", "address", "single", "--testing", "ed25519_pk1",
    ]


@pytest.mark.parametrize("output", ["not found", "- 1\n- 2\n", "counter: [unclosed"])
def test_rest_account_unexpected_output(jcli, fake_jcli, output):
    fake_jcli.account_output = output
    with pytest.raises(JCLIError, match="Unexpected account state"):
        jcli.rest_account_counter("ta1abc", "http://node/api")
