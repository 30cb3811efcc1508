from jormungandr_tools import Faucet, FaucetConfig, LinearFee
import logging

# Setup logging
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(message)s",
)

config = FaucetConfig(
    cli="/usr/local/bin/jcli",
    rest_url="http://127.0.0.1:8443/api",
    block0_hash="adbdd5ede31637f6c9bad5c271eec0bc3d0cb9efb86a5b913bb55cba549d0770",
    faucet_sk="ed25519e_sk1...",
    fees=LinearFee(constant=10, coefficient=0, certificate=0),
    addr_type="--testing",
    working_dir="/home/jormungandr/.jormungandr-tools/",
)

# Register the pool and save the secret the node needs to produce blocks.
pool = Faucet(config).create_stake_pool()
print(f"Stake Pool ID: {pool.pool_id}")
pool.write_node_secret("/home/jormungandr/pool_secret.yaml")
