from pathlib import Path

from jormungandr_tools import FaucetConfig, render_template

# Fill a bootstrap shell template (####CLI####, ####REST_URL####, ...) with
# the faucet configuration.
config = FaucetConfig.load("faucet.yaml")
template = Path("create-stakepool.shtempl").read_text()
Path("create-stakepool.sh").write_text(render_template(template, config))
