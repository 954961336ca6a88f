"""Brokerage account queries."""

from __future__ import annotations

from typing import Any

from .executor import RequestExecutor


class AccountsManager:
    """Lists and fetches trading accounts."""

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def list_accounts(self, limit: int = 49, cursor: str | None = None) -> list[dict[str, Any]]:
        """Return one page of accounts.

        Raises:
            ValueError: If limit is not positive
        """
        if limit <= 0:
            raise ValueError("Limit must be greater than zero")

        data = await self.executor.send(
            "GET",
            "/api/v3/brokerage/accounts",
            {"limit": limit, "cursor": cursor},
        )
        return list((data or {}).get("accounts", []))

    async def get_account(self, account_uuid: str) -> dict[str, Any] | None:
        if not account_uuid or not account_uuid.strip():
            raise ValueError("Account UUID cannot be empty")

        data = await self.executor.send("GET", f"/api/v3/brokerage/accounts/{account_uuid}")
        return (data or {}).get("account")
