"""
SPL token balance lookup over Solana JSON-RPC.

Sums the UI amount of every token account the owner holds for the configured
mint. Any transport failure, malformed payload or missing ``result.value``
yields a balance of 0.
"""

import logging
from typing import Any

import httpx

from pumpwork.rules.models import TokenRules

logger = logging.getLogger(__name__)


def build_request(owner: str, mint: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "getTokenAccountsByOwner",
        "params": [owner, {"mint": mint}, {"encoding": "jsonParsed"}],
    }


def parse_balance(payload: Any) -> float:
    result = payload.get("result") if isinstance(payload, dict) else None
    accounts = result.get("value") if isinstance(result, dict) else None
    if not accounts:
        logger.info("No token accounts found for wallet")
        return 0

    total = 0.0
    for account in accounts:
        token_amount = account["account"]["data"]["parsed"]["info"]["tokenAmount"]
        amount = token_amount.get("uiAmount")
        if amount is None:
            amount = float(token_amount.get("uiAmountString") or 0)
        total += amount
    return total


class SolanaBalanceClient:
    def __init__(
        self,
        rpc_url: str,
        mint: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ):
        self.rpc_url = rpc_url
        self.mint = mint
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_rules(
        cls,
        rules: TokenRules,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ) -> "SolanaBalanceClient":
        return cls(rules.rpc_url, rules.mint, rules.rpc_timeout_seconds, transport)

    async def fetch_balance(self, owner: str) -> float:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport  # type: ignore[arg-type]
            ) as client:
                response = await client.post(self.rpc_url, json=build_request(owner, self.mint))
            balance = parse_balance(response.json())
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.error("Token balance check failed for %s: %s", owner, e)
            return 0
        logger.info("Token balance for %s: %s", owner, balance)
        return balance

    def fetch_balance_sync(self, owner: str) -> float:
        try:
            with httpx.Client(
                timeout=self.timeout, transport=self._transport  # type: ignore[arg-type]
            ) as client:
                response = client.post(self.rpc_url, json=build_request(owner, self.mint))
            balance = parse_balance(response.json())
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.error("Token balance check failed for %s: %s", owner, e)
            return 0
        logger.info("Token balance for %s: %s", owner, balance)
        return balance


class StaticBalanceSource:
    """Fixed balances per address; used for offline runs and tests."""

    def __init__(self, balances: dict[str, float] | None = None):
        self.balances = dict(balances or {})

    async def fetch_balance(self, owner: str) -> float:
        return self.balances.get(owner, 0)

    def fetch_balance_sync(self, owner: str) -> float:
        return self.balances.get(owner, 0)
