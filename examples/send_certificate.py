from jormungandr_tools import Faucet, FaucetConfig
import logging

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)

# Configuration file with environment overrides (JORMUNGANDR_FAUCET_SK...)
config = FaucetConfig.load("faucet.yaml")

fragment_id = Faucet(config).send_certificate("stake_delegation.signcert")
print(f"Fragment ID: {fragment_id}")
