"""
Record Cache Module

Keeps the last fetched record set on disk so reports can be rebuilt
without querying the HR API again.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from domain.entities import AttendanceRecord
from infrastructure.logger import get_logger

logger = get_logger("RecordCache")


@dataclass
class CachedRecords:
    """Records restored from the cache file."""
    records: List[AttendanceRecord]
    fetched_at: Optional[str]
    em_code: str


class RecordCache:
    """
    JSON file cache of fetched attendance records.

    File layout::

        {"records": [...], "fetchedAt": "YYYY-MM-DD HH:MM:SS", "emCode": "..."}

    The cache belongs to one employee code; loading it for another code
    returns nothing.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def save(
        self,
        records: List[AttendanceRecord],
        em_code: str,
        fetched_at: str
    ) -> None:
        data = {
            "records": [record.to_dict() for record in records],
            "fetchedAt": fetched_at,
            "emCode": em_code
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False)
        logger.info(f"已快取 {len(records)} 筆出勤紀錄: {self.path}")

    def load(self, em_code: str) -> Optional[CachedRecords]:
        """
        Load cached records for an employee code.

        Returns:
            CachedRecords, or None when the cache is missing, unreadable,
            malformed, or belongs to another employee code
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            cached_em_code = data.get("emCode")
            if not cached_em_code or cached_em_code != em_code:
                logger.info("快取工號與目前工號不同，忽略快取")
                return None
            records = [AttendanceRecord.from_dict(item) for item in data["records"]]
        except (OSError, json.JSONDecodeError, AttributeError, KeyError, TypeError) as e:
            logger.warning(f"快取讀取失敗，已忽略: {e}")
            return None

        return CachedRecords(
            records=records,
            fetched_at=data.get("fetchedAt"),
            em_code=cached_em_code
        )

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info(f"已清除快取: {self.path}")
