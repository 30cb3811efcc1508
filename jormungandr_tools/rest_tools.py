import logging

import requests

# Setup logging
logger = logging.getLogger(__name__)


class NodeRESTError(Exception):
    pass


class NodeREST:
    """Minimal client for the jormungandr node REST API (v0)."""

    def __init__(self, rest_url, timeout=None):
        self.rest_url = rest_url.rstrip("/")
        self.timeout = timeout

    def _url(self, path):
        # The REST URL may be given with or without the /api prefix.
        if self.rest_url.endswith("/api"):
            return f"{self.rest_url}/v0/{path}"
        return f"{self.rest_url}/api/v0/{path}"

    def _check(self, r):
        if not r.ok:
            raise NodeRESTError(
                f"Request to {r.url} failed with status {r.status_code}: "
                f"{r.text.strip()}"
            )
        return r

    def get_settings(self) -> dict:
        """Node settings, including the genesis block hash and the fee
        schedule.
        """
        url = self._url("settings")
        logger.debug(f"GET {url}")
        r = self._check(requests.get(url, timeout=self.timeout))
        return r.json()

    def get_account(self, account_id) -> dict:
        url = self._url(f"account/{account_id}")
        logger.debug(f"GET {url}")
        r = self._check(requests.get(url, timeout=self.timeout))
        return r.json()

    def get_spending_counter(self, account_id) -> int:
        account = self.get_account(account_id)
        if "counter" in account:
            return int(account["counter"])
        counters = account.get("counters") or [0]
        return int(counters[0])

    def post_message(self, message) -> str:
        """Submit a transaction message and return the fragment id.

        Parameters
        ----------
        message : str or bytes
            The message, either raw bytes or hex encoded as printed by
            ``jcli transaction to-message``.
        """
        if isinstance(message, str):
            message = bytes.fromhex(message.strip())
        url = self._url("message")
        logger.debug(f"POST {url} ({len(message)} bytes)")
        r = self._check(
            requests.post(
                url,
                data=message,
                headers={"Content-Type": "application/octet-stream"},
                timeout=self.timeout,
            )
        )
        return r.text.strip()
