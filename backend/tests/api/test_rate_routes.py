"""Tests for the plain-text conversion and history endpoints (api/routes/rate_routes.py)."""

from datetime import date

from fastapi.testclient import TestClient

from tests.conftest import FIXED_TODAY, weekday_series


def _assert_text_response(response):
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    assert response.headers["access-control-allow-origin"] == "*"


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


class TestConversion:
    def test_should_return_200_with_converted_amount(self, client: TestClient, fake_source):
        # Arrange
        fake_source.latest[("USD", "CNY")] = 7.2

        # Act
        response = client.get("/", params={"from": "美元", "to": "人民币", "amount": "3万"})

        # Assert
        assert response.status_code == 200
        _assert_text_response(response)
        assert response.text.startswith("💱 30,000 USD = CN¥216,000.00")
        assert "📊 1 USD = 7.200000 CNY" in response.text

    def test_should_route_any_other_path_to_conversion(self, client: TestClient, fake_source):
        # Arrange
        fake_source.latest[("EUR", "JPY")] = 160.0

        # Act
        response = client.get("/convert/now", params={"from": "EUR", "to": "JPY"})

        # Assert
        assert response.status_code == 200
        assert "1 EUR" in response.text

    def test_should_return_400_for_unrecognized_currency(self, client: TestClient, fake_source):
        # Act
        response = client.get("/", params={"from": "XYZ", "to": "CNY"})

        # Assert
        assert response.status_code == 400
        _assert_text_response(response)
        assert response.text == "❌ 无法识别货币: XYZ"
        assert fake_source.calls == []

    def test_should_return_400_when_currency_missing(self, client: TestClient):
        # Act
        response = client.get("/")

        # Assert
        assert response.status_code == 400
        assert response.text == "❌ 无法识别货币对"

    def test_should_return_400_for_invalid_amount(self, client: TestClient):
        # Act
        response = client.get("/", params={"from": "USD", "to": "CNY", "amount": "abc"})

        # Assert
        assert response.status_code == 400
        assert "abc" in response.text

    def test_should_return_502_when_upstream_unavailable(self, client: TestClient, fake_source):
        # Arrange
        fake_source.fail_when = lambda *_: True

        # Act
        response = client.get("/", params={"from": "USD", "to": "CNY"})

        # Assert
        assert response.status_code == 502
        _assert_text_response(response)
        assert "fake://" not in response.text

    def test_should_render_english_when_requested(self, client: TestClient, fake_source):
        # Arrange
        fake_source.latest[("USD", "CNY")] = 7.2

        # Act
        response = client.get("/", params={"from": "USD", "to": "CNY", "lang": "en"})

        # Assert
        assert response.status_code == 200
        assert "Ask for a period" in response.text


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class TestHistory:
    def test_should_return_200_with_yearly_summary(self, client: TestClient, fake_source):
        # Arrange
        fake_source.series[("USD", "CNY")] = weekday_series(
            date(2020, 6, 16), FIXED_TODAY, 6.5, 0.0005
        )

        # Act
        response = client.get(
            "/history", params={"from": "USD", "to": "CNY", "range": "过去5年"}
        )

        # Assert
        assert response.status_code == 200
        _assert_text_response(response)
        assert "📊 USD/CNY 过去5年汇率统计" in response.text
        assert "2020年:" in response.text
        assert "2025年:" in response.text

    def test_should_match_any_history_prefixed_path(self, client: TestClient, fake_source):
        # Arrange
        fake_source.series[("USD", "JPY")] = weekday_series(
            date(2024, 6, 17), FIXED_TODAY, 150.0
        )

        # Act
        response = client.get(
            "/history/usd-jpy", params={"from": "USD", "to": "JPY", "range": "过去1年"}
        )

        # Assert
        assert response.status_code == 200
        assert "USD/JPY" in response.text

    def test_should_default_to_ten_years(self, client: TestClient, fake_source):
        # Arrange
        fake_source.series[("USD", "CNY")] = weekday_series(
            date(2015, 6, 16), FIXED_TODAY, 6.5
        )

        # Act
        response = client.get("/history", params={"from": "USD", "to": "CNY"})

        # Assert
        assert response.status_code == 200
        assert "过去10年" in response.text

    def test_should_return_400_for_same_currency(self, client: TestClient, fake_source):
        # Act
        response = client.get("/history", params={"from": "USD", "to": "美金"})

        # Assert
        assert response.status_code == 400
        assert fake_source.calls == []

    def test_should_return_502_when_every_fallback_failed(self, client: TestClient, fake_source):
        # Arrange
        fake_source.fail_when = lambda *_: True

        # Act
        response = client.get("/history", params={"from": "USD", "to": "CNY"})

        # Assert
        assert response.status_code == 502
        _assert_text_response(response)
        assert response.text.startswith("❌ USD/CNY 过去10年历史数据暂不可用")
        assert "💡 建议：" in response.text

    def test_should_return_503_when_data_insufficient(self, client: TestClient, fake_source):
        # Arrange
        fake_source.series[("USD", "CNY")] = {date(2025, 1, 2): 7.3, date(2025, 3, 3): 7.2}

        # Act
        response = client.get("/history", params={"from": "USD", "to": "CNY"})

        # Assert
        assert response.status_code == 503
        assert "（仅取得 2 个数据点）" in response.text

    def test_should_annotate_reduced_range(self, client: TestClient, fake_source):
        # Arrange
        fake_source.series[("USD", "CNY")] = weekday_series(
            date(2015, 6, 16), FIXED_TODAY, 7.0
        )
        fake_source.fail_when = lambda s, t, r: r is not None and r.days > 4 * 366

        # Act
        response = client.get("/history", params={"from": "USD", "to": "CNY"})

        # Assert
        assert response.status_code == 200
        assert response.text.endswith("⚠️ 完整历史数据暂不可用，已显示过去3年数据")


# ---------------------------------------------------------------------------
# Cross-cutting
# ---------------------------------------------------------------------------


class TestRequestId:
    def test_should_generate_request_id_header(self, client: TestClient):
        response = client.get("/health")
        assert response.headers.get("x-request-id")

    def test_should_echo_caller_request_id(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["x-request-id"] == "abc123"
