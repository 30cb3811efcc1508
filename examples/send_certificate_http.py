from jormungandr_tools import Faucet, FaucetConfig, NodeREST
import logging

# Setup logging
logging.basicConfig(level=logging.DEBUG)

# Talk to the node REST API directly instead of through `jcli rest`, and take
# the genesis hash and fees from the node itself.
config = FaucetConfig.load("faucet.yaml")
config.rest_client = "http"
rest = NodeREST(config.rest_url, timeout=30)
config.update_from_node(rest)

faucet = Faucet(config, rest=rest)
print(faucet.send_certificate("stake_delegation.signcert"))
