"""
Request Facade

One client for the presentation layer, whatever runs underneath.

DESIGN DECISION: The transport is chosen once, at construction:
- Online: a requests.Session talking to the ledger server
- Offline (native bridge detected): an in-process TestClient wrapping an
  app backed by LocalFileLedgerStorage

Both expose the same request(method, url, json=, params=) call, and the
offline app is built from the same router as the server, so the path
dispatch table is shared and the contract is identical. There is no
migration between the two id spaces; a session uses one store only.
"""

import os
import sys
from pathlib import Path
from typing import Any, Optional

import requests
import structlog
from fastapi.testclient import TestClient

from finance_tracker.api import create_app
from finance_tracker.audit import AuditLogger
from finance_tracker.config import Settings, get_settings
from finance_tracker.ledger import LedgerService
from finance_tracker.services.storage import LocalFileLedgerStorage


logger = structlog.get_logger(__name__)

OFFLINE_BASE_URL = "http://offline"


class ApiRequestError(Exception):
    """A ledger request failed. Carries the HTTP status and server message."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"{status}: {message}")


def detect_native_bridge(settings: Optional[Settings] = None) -> bool:
    """
    Whether the process runs inside a native mobile shell.

    Explicit configuration wins; otherwise Android and iOS runtimes are
    recognized from the interpreter platform and environment.
    """
    settings = settings or get_settings()
    if settings.offline.native_bridge:
        return True
    if sys.platform in ("android", "ios"):
        return True
    return "ANDROID_DATA" in os.environ and "ANDROID_ROOT" in os.environ


class FinanceApiClient:
    """
    Client for every ledger route.

    Use FinanceApiClient.online() / FinanceApiClient.offline(), or
    create_api_client() to pick automatically.
    """

    def __init__(
        self,
        session: Any,
        base_url: str,
        timeout: Optional[float] = None,
        offline: bool = False,
    ):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._offline = offline

    @classmethod
    def online(cls, settings: Optional[Settings] = None) -> "FinanceApiClient":
        settings = settings or get_settings()
        return cls(
            requests.Session(),
            settings.api.base_url,
            timeout=settings.api.request_timeout_seconds,
        )

    @classmethod
    def offline(
        cls,
        data_path: Optional[Path] = None,
        settings: Optional[Settings] = None,
    ) -> "FinanceApiClient":
        settings = settings or get_settings()
        audit_logger = AuditLogger()
        storage = LocalFileLedgerStorage(
            path=data_path or settings.offline.data_path,
            audit_logger=audit_logger,
        )
        service = LedgerService(storage, audit_logger=audit_logger, settings=settings.app)
        app = create_app(service=service, settings=settings)
        session = TestClient(app, base_url=OFFLINE_BASE_URL, raise_server_exceptions=False)
        return cls(session, OFFLINE_BASE_URL, offline=True)

    @property
    def is_offline(self) -> bool:
        return self._offline

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "FinanceApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Core request
    # -------------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            ApiRequestError: On any non-2xx response or connection failure
        """
        url = self._base_url + path
        kwargs: dict[str, Any] = {"json": json}
        if params:
            kwargs["params"] = {k: v for k, v in params.items() if v is not None}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            response = self._session.request(method.upper(), url, **kwargs)
        except requests.RequestException as e:
            logger.error("api_request_failed", method=method, path=path, error=str(e))
            raise ApiRequestError(0, f"Connection failed: {e}") from e

        logger.debug(
            "api_request",
            method=method,
            path=path,
            status=response.status_code,
            offline=self._offline,
        )

        if response.status_code >= 400:
            raise ApiRequestError(response.status_code, _error_message(response))
        return response.json()

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def list_categories(self) -> list[dict]:
        return self.request("GET", "/api/categories")

    def create_category(self, data: dict) -> dict:
        return self.request("POST", "/api/categories", json=data)

    def delete_category(self, category_id: str) -> dict:
        return self.request("DELETE", f"/api/categories/{category_id}")

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def list_transactions(
        self,
        type: Optional[str] = None,
        category_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[dict]:
        params = {"type": type, "categoryId": category_id, "month": month, "year": year}
        return self.request("GET", "/api/transactions", params=params)

    def create_transaction(self, data: dict) -> dict:
        return self.request("POST", "/api/transactions", json=data)

    def update_transaction(self, transaction_id: str, data: dict) -> dict:
        return self.request("PUT", f"/api/transactions/{transaction_id}", json=data)

    def delete_transaction(self, transaction_id: str) -> dict:
        return self.request("DELETE", f"/api/transactions/{transaction_id}")

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    def list_budgets(self, month: Optional[int] = None, year: Optional[int] = None) -> list[dict]:
        return self.request("GET", "/api/budgets", params={"month": month, "year": year})

    def budget_overview(self, month: Optional[int] = None, year: Optional[int] = None) -> dict:
        return self.request("GET", "/api/budgets/overview", params={"month": month, "year": year})

    def create_budget(self, data: dict) -> dict:
        return self.request("POST", "/api/budgets", json=data)

    def delete_budget(self, budget_id: str) -> dict:
        return self.request("DELETE", f"/api/budgets/{budget_id}")

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    def list_goals(self) -> list[dict]:
        return self.request("GET", "/api/goals")

    def create_goal(self, data: dict) -> dict:
        return self.request("POST", "/api/goals", json=data)

    def update_goal(self, goal_id: str, data: dict) -> dict:
        return self.request("PATCH", f"/api/goals/{goal_id}", json=data)

    def goal_progress(self, goal_id: str) -> dict:
        return self.request("GET", f"/api/goals/{goal_id}/progress")

    def delete_goal(self, goal_id: str) -> dict:
        return self.request("DELETE", f"/api/goals/{goal_id}")

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def dashboard(self) -> dict:
        return self.request("GET", "/api/dashboard")

    def statistics(self) -> dict:
        return self.request("GET", "/api/statistics")


def _error_message(response: Any) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "Request failed"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text or "Request failed"


def create_api_client(
    settings: Optional[Settings] = None,
    data_path: Optional[Path] = None,
) -> FinanceApiClient:
    """Pick the offline mirror when a native bridge is present, else the server."""
    settings = settings or get_settings()
    if detect_native_bridge(settings):
        logger.info("api_client_mode", mode="offline")
        return FinanceApiClient.offline(data_path=data_path, settings=settings)
    logger.info("api_client_mode", mode="online", base_url=settings.api.base_url)
    return FinanceApiClient.online(settings)
