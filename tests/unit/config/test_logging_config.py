"""Unit tests для structlog processors."""

from copytrade.config.logging import filter_sensitive_data


class TestFilterSensitiveData:
    def test_top_level_secrets_redacted(self):
        event = {"event": "brokerage.request", "userSecret": "s3cr3t", "account_id": "acc-1"}

        result = filter_sensitive_data(None, "info", event)

        assert result["userSecret"] == "[REDACTED]"
        assert result["account_id"] == "acc-1"

    def test_nested_payload_redacted(self):
        event = {
            "event": "api.webhook.received",
            "payload": {"webhookSecret": "abc", "details": {"signature": "x", "symbol": "AAPL"}},
        }

        result = filter_sensitive_data(None, "info", event)

        assert result["payload"]["webhookSecret"] == "[REDACTED]"
        assert result["payload"]["details"] == {"signature": "[REDACTED]", "symbol": "AAPL"}
