"""
Attendance API Module

HTTP client for the HR attendance calendar endpoint.
"""

from typing import List, Optional

import requests

from domain.entities import RawCalendarEntry
from infrastructure.logger import get_logger

logger = get_logger("AttendanceApi")


# ==============================================================================
# Custom Exceptions
# ==============================================================================
class AttendanceError(Exception):
    """Base exception for attendance-related errors."""
    pass


class MissingCredentialsError(AttendanceError):
    """Raised when the employee code or authorization token is blank."""

    def __init__(self, message: str = None):
        self.message = message or "請先填寫 emCode 與 Authorization。"
        super().__init__(self.message)


class ApiRequestError(AttendanceError):
    """Raised on transport failures and HTTP error statuses."""

    def __init__(self, cycle: str, reason: str, status_code: Optional[int] = None):
        self.cycle = cycle
        self.status_code = status_code
        self.message = f"{cycle} 請求失敗：{reason}"
        super().__init__(self.message)


class ApiResponseError(AttendanceError):
    """Raised when the API answers with malformed JSON or a non-zero code."""

    def __init__(self, cycle: str, reason: str, code: Optional[int] = None):
        self.cycle = cycle
        self.code = code
        self.message = f"{cycle} 請求失敗：{reason}"
        super().__init__(self.message)


# ==============================================================================
# AttendanceApiClient Class
# ==============================================================================
class AttendanceApiClient:
    """
    Fetches the monthly attendance calendar of one employee.

    Each call is a single GET with the employee code and cycle (YYYY-MM)
    as query parameters. The response envelope is
    ``{code, data: {calendarList: [...]}, message}``; ``code != 0`` is an
    application-level failure.
    """

    UNKNOWN_ERROR = "未知錯誤"
    MALFORMED_RESPONSE = "回應格式錯誤"

    def __init__(
        self,
        base_url: str,
        em_code: str,
        authorization: str,
        app_key: str = "360teams",
        user_agent: str = "Mozilla/5.0",
        timeout: float = 20,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url
        self.em_code = em_code
        self.authorization = authorization
        self.app_key = app_key
        self.user_agent = user_agent
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config, session: Optional[requests.Session] = None):
        """Create a client from an AppConfig."""
        return cls(
            base_url=config.api.base_url,
            em_code=config.credentials.em_code,
            authorization=config.credentials.authorization,
            app_key=config.api.app_key,
            user_agent=config.api.user_agent,
            timeout=config.api.timeout,
            session=session
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        self._session.close()

    def ensure_credentials(self) -> None:
        """
        Raises:
            MissingCredentialsError: If emCode or Authorization is blank
        """
        if not (self.em_code or "").strip() or not (self.authorization or "").strip():
            raise MissingCredentialsError()

    def _headers(self) -> dict:
        return {
            "User-Agent": self.user_agent,
            "AppKey": self.app_key,
            "Authorization": self.authorization
        }

    def get_calendar(self, cycle: str) -> List[RawCalendarEntry]:
        """
        Fetch the calendar list of one cycle.

        Args:
            cycle: Month to query (YYYY-MM)

        Returns:
            List of RawCalendarEntry (empty when the payload has no calendar)

        Raises:
            MissingCredentialsError: If credentials are blank
            ApiRequestError: On network failure or HTTP error status
            ApiResponseError: On malformed JSON or non-zero code
        """
        self.ensure_credentials()
        params = {"emCode": self.em_code, "attDate": "", "cycle": cycle}

        logger.debug(f"查詢出勤資料: cycle={cycle}")
        try:
            response = self._session.get(
                self.base_url,
                headers=self._headers(),
                params=params,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"{cycle} HTTP 錯誤: {e}")
            raise ApiRequestError(cycle, str(e), status_code=status) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"{cycle} 連線失敗: {e}")
            raise ApiRequestError(cycle, str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"{cycle} 回應不是有效的 JSON: {e}")
            raise ApiResponseError(cycle, self.MALFORMED_RESPONSE) from e

        if not isinstance(payload, dict) or payload.get("code") != 0:
            message = None
            code = None
            if isinstance(payload, dict):
                message = payload.get("message")
                code = payload.get("code")
            logger.error(f"{cycle} API 回傳失敗: code={code}, message={message}")
            raise ApiResponseError(cycle, message or self.UNKNOWN_ERROR, code=code)

        data = payload.get("data") or {}
        calendar_list = None
        if isinstance(data, dict):
            calendar_list = data.get("calendarList") or []
        if not isinstance(calendar_list, list) or \
                not all(isinstance(item, dict) for item in calendar_list):
            logger.error(f"{cycle} calendarList 結構錯誤")
            raise ApiResponseError(cycle, self.MALFORMED_RESPONSE)

        try:
            entries = [RawCalendarEntry.from_api(item) for item in calendar_list]
        except (AttributeError, TypeError, ValueError) as e:
            logger.error(f"{cycle} 日曆資料欄位錯誤: {e}")
            raise ApiResponseError(cycle, self.MALFORMED_RESPONSE) from e
        logger.debug(f"{cycle} 取得 {len(entries)} 筆日曆資料")
        return entries
