"""
Tests for the request facade.

The offline mirror runs against a temporary directory; the online path is
checked for transport selection and error decoding only.
"""

from datetime import date

import pytest

from finance_tracker.client import (
    ApiRequestError,
    FinanceApiClient,
    create_api_client,
    detect_native_bridge,
)
from finance_tracker.config import Settings


class _FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    def json(self):
        return self._body


class _FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.response

    def close(self):
        pass


@pytest.fixture
def offline_client(tmp_path):
    client = FinanceApiClient.offline(data_path=tmp_path / "ledger.json", settings=Settings())
    yield client
    client.close()


class TestNativeBridgeDetection:
    """Tests for environment detection."""

    def test_flag_forces_offline(self, monkeypatch):
        """Test that OFFLINE_NATIVE_BRIDGE enables the mirror."""
        monkeypatch.setenv("OFFLINE_NATIVE_BRIDGE", "true")
        assert detect_native_bridge(Settings()) is True

    def test_android_environment(self, monkeypatch):
        """Test that an Android runtime is recognized."""
        monkeypatch.setenv("OFFLINE_NATIVE_BRIDGE", "false")
        monkeypatch.setenv("ANDROID_DATA", "/data")
        monkeypatch.setenv("ANDROID_ROOT", "/system")
        assert detect_native_bridge(Settings()) is True

    def test_plain_environment(self, monkeypatch):
        """Test that a desktop/server process stays online."""
        monkeypatch.setenv("OFFLINE_NATIVE_BRIDGE", "false")
        monkeypatch.delenv("ANDROID_DATA", raising=False)
        monkeypatch.delenv("ANDROID_ROOT", raising=False)
        if detect_native_bridge(Settings()):
            pytest.skip("running on a mobile platform")
        client = create_api_client(Settings())
        assert client.is_offline is False
        client.close()

    def test_create_api_client_offline(self, monkeypatch, tmp_path):
        """Test that a detected bridge yields the offline mirror."""
        monkeypatch.setenv("OFFLINE_NATIVE_BRIDGE", "true")
        client = create_api_client(Settings(), data_path=tmp_path / "ledger.json")
        assert client.is_offline is True
        client.close()


class TestOnlineRequests:
    """Tests for request building and error decoding."""

    def test_request_builds_url_and_drops_empty_params(self):
        """Test URL joining and None-param filtering."""
        session = _FakeSession(_FakeResponse(200, []))
        client = FinanceApiClient(session, "http://ledger.local/", timeout=5)

        client.list_transactions(type="expense", month=None)

        method, url, kwargs = session.calls[0]
        assert method == "GET"
        assert url == "http://ledger.local/api/transactions"
        assert kwargs["params"] == {"type": "expense"}
        assert kwargs["timeout"] == 5

    def test_error_carries_status_and_message(self):
        """Test that error bodies become ApiRequestError."""
        session = _FakeSession(_FakeResponse(404, {"message": "Goal not found"}))
        client = FinanceApiClient(session, "http://ledger.local")

        with pytest.raises(ApiRequestError) as exc_info:
            client.delete_goal("missing")

        assert exc_info.value.status == 404
        assert exc_info.value.message == "Goal not found"


class TestOfflineMirror:
    """Tests for the offline mirror behind the facade."""

    def test_seeded_categories(self, offline_client):
        """Test that the mirror seeds six categories with offline ids."""
        categories = offline_client.list_categories()
        assert len(categories) == 6

        created = offline_client.create_category({"name": "Pets", "icon": "Heart", "color": "#123456"})
        assert created["id"].startswith("cat-")
        assert created["icon"] == "heart"

    def test_budget_spent_scenario(self, offline_client):
        """Test that the offline mirror applies the same budget rule."""
        today = date.today()
        category = offline_client.create_category({"name": "Test", "icon": "Coffee", "color": "#000000"})
        offline_client.create_budget({
            "name": "Test Budget",
            "amount": "100.00",
            "categoryId": category["id"],
            "month": today.month,
            "year": today.year,
        })
        offline_client.create_transaction({
            "amount": "30.00",
            "type": "expense",
            "categoryId": category["id"],
        })

        budgets = offline_client.list_budgets(month=today.month, year=today.year)
        assert budgets[0]["spent"] == "30.00"

        dashboard = offline_client.dashboard()
        assert dashboard["expenses"] == "30.00"
        assert dashboard["budgets"][0]["spent"] == "30.00"

    def test_errors_match_server_contract(self, offline_client):
        """Test that offline errors use the same statuses and messages."""
        with pytest.raises(ApiRequestError) as exc_info:
            offline_client.delete_transaction("missing")
        assert exc_info.value.status == 404
        assert exc_info.value.message == "Transaction not found"

        with pytest.raises(ApiRequestError) as exc_info:
            offline_client.create_transaction({"amount": "5", "type": "expense", "categoryId": "cat-others"})
        assert exc_info.value.status == 400

    def test_data_persists_across_clients(self, tmp_path):
        """Test that a new client sees the previous session's data."""
        path = tmp_path / "ledger.json"
        with FinanceApiClient.offline(data_path=path, settings=Settings()) as first:
            goal = first.create_goal({
                "name": "Trip", "targetAmount": "500", "targetDate": "2099-06-01T00:00:00",
            })

        with FinanceApiClient.offline(data_path=path, settings=Settings()) as second:
            goals = second.list_goals()
            assert [g["id"] for g in goals] == [goal["id"]]
            assert second.goal_progress(goal["id"])["remaining"] == "500.00"
