"""
Unit tests for the attendance API client.
"""

import pytest
from datetime import datetime
from unittest.mock import MagicMock
from pathlib import Path

import requests

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.attendance_service import AttendanceService
from config.config_manager import AppConfig
from infrastructure.attendance_api import (
    AttendanceApiClient, AttendanceError, MissingCredentialsError,
    ApiRequestError, ApiResponseError
)


def make_response(payload=None, status_code=200, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error", response=response
        )
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    return response


def make_client(response=None, em_code="E001", authorization="token", **kwargs):
    session = MagicMock()
    if response is not None:
        session.get.return_value = response
    client = AttendanceApiClient(
        base_url="https://example.test/detail",
        em_code=em_code,
        authorization=authorization,
        session=session,
        **kwargs
    )
    return client, session


class TestGetCalendar:
    """Tests for AttendanceApiClient.get_calendar."""

    def test_success(self):
        payload = {
            "code": 0,
            "data": {"calendarList": [
                {"attDate": "2026-01-05", "isrest": 0, "firstDate": "2026-01-05 09:00:00",
                 "endDate": "2026-01-05 20:00:00", "exp": None, "resultList": []},
                {"attDate": "2026-01-06", "isrest": 1},
            ]},
            "message": "ok"
        }
        client, session = make_client(make_response(payload))

        entries = client.get_calendar("2026-01")

        assert [e.date for e in entries] == ["2026-01-05", "2026-01-06"]
        assert entries[1].is_rest == 1

    def test_request_shape(self):
        """Test query parameters, headers and timeout."""
        client, session = make_client(
            make_response({"code": 0, "data": {"calendarList": []}}),
            timeout=5
        )
        client.get_calendar("2026-02")

        args, kwargs = session.get.call_args
        assert args[0] == "https://example.test/detail"
        assert kwargs["params"] == {"emCode": "E001", "attDate": "", "cycle": "2026-02"}
        assert kwargs["headers"] == {
            "User-Agent": "Mozilla/5.0",
            "AppKey": "360teams",
            "Authorization": "token"
        }
        assert kwargs["timeout"] == 5

    def test_missing_calendar_is_empty(self):
        client, _ = make_client(make_response({"code": 0, "data": None}))
        assert client.get_calendar("2026-01") == []

    def test_nonzero_code(self):
        client, _ = make_client(make_response({"code": 401, "message": "token expired"}))
        with pytest.raises(ApiResponseError) as exc_info:
            client.get_calendar("2026-01")
        assert exc_info.value.code == 401
        assert str(exc_info.value) == "2026-01 請求失敗：token expired"

    def test_nonzero_code_without_message(self):
        client, _ = make_client(make_response({"code": 1}))
        with pytest.raises(ApiResponseError) as exc_info:
            client.get_calendar("2026-01")
        assert str(exc_info.value) == "2026-01 請求失敗：未知錯誤"

    def test_http_error(self):
        client, _ = make_client(make_response(status_code=500))
        with pytest.raises(ApiRequestError) as exc_info:
            client.get_calendar("2026-01")
        assert exc_info.value.status_code == 500
        assert exc_info.value.cycle == "2026-01"

    def test_connection_error(self):
        client, session = make_client()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(ApiRequestError) as exc_info:
            client.get_calendar("2026-01")
        assert exc_info.value.status_code is None
        assert "refused" in str(exc_info.value)

    def test_invalid_json(self):
        client, _ = make_client(make_response(json_error=True))
        with pytest.raises(ApiResponseError):
            client.get_calendar("2026-01")

    def test_non_object_payload(self):
        client, _ = make_client(make_response(["unexpected"]))
        with pytest.raises(ApiResponseError):
            client.get_calendar("2026-01")

    @pytest.mark.parametrize("payload", [
        {"code": 0, "data": ["x"]},
        {"code": 0, "data": {"calendarList": "2026-01-05"}},
        {"code": 0, "data": {"calendarList": [None]}},
        {"code": 0, "data": {"calendarList": [{"attDate": "2026-01-05", "isrest": "N"}]}},
        {"code": 0, "data": {"calendarList": [{"attDate": "2026-01-05", "resultList": 5}]}},
    ])
    def test_malformed_calendar(self, payload):
        """Test that a well-formed envelope with a broken calendar is a response error."""
        client, _ = make_client(make_response(payload))
        with pytest.raises(ApiResponseError) as exc_info:
            client.get_calendar("2026-01")
        assert str(exc_info.value) == "2026-01 請求失敗：回應格式錯誤"

    def test_malformed_calendar_becomes_failed_fetch(self):
        """Test that the service reports a broken calendar as a failed fetch."""
        client, _ = make_client(make_response({"code": 0, "data": {"calendarList": [None]}}))
        service = AttendanceService(client, clock=lambda: datetime(2026, 2, 10, 9, 0, 0))

        result = service.fetch_months(["2026-01"])

        assert result.success is False
        assert result.error_message == "2026-01 請求失敗：回應格式錯誤"

    @pytest.mark.parametrize("em_code, authorization", [
        ("", "token"), ("E001", ""), ("   ", "token"), ("E001", None),
    ])
    def test_missing_credentials(self, em_code, authorization):
        """Test that blank credentials fail before any request."""
        client, session = make_client(em_code=em_code, authorization=authorization)
        with pytest.raises(MissingCredentialsError) as exc_info:
            client.get_calendar("2026-01")
        assert exc_info.value.message == "請先填寫 emCode 與 Authorization。"
        session.get.assert_not_called()

    def test_errors_share_base_class(self):
        for error_cls in (MissingCredentialsError, ApiRequestError, ApiResponseError):
            assert issubclass(error_cls, AttendanceError)


class TestClientConstruction:
    """Tests for from_config and session handling."""

    def test_from_config(self):
        config = AppConfig()
        config.credentials.em_code = "E009"
        config.credentials.authorization = "abc"
        config.api.timeout = 7
        session = MagicMock()

        client = AttendanceApiClient.from_config(config, session=session)

        assert client.em_code == "E009"
        assert client.authorization == "abc"
        assert client.timeout == 7
        assert client.base_url == config.api.base_url

    def test_context_manager_closes_session(self):
        client, session = make_client()
        with client:
            pass
        session.close.assert_called_once()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
