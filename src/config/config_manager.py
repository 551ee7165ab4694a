"""
Configuration Manager Module

Handles loading, saving, and managing application configuration.
Provides bi-directional mapping between the dataclass tree and JSON persistence.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from infrastructure.logger import get_logger

logger = get_logger("ConfigManager")

DEFAULT_API_URL = (
    "https://im.360teams.com/api/qfin-api/securityapi/attendance/query/detail"
)


@dataclass
class Credentials:
    """HR account used for the attendance query."""
    em_code: str = ""          # 工號
    authorization: str = ""    # Authorization header token


@dataclass
class ApiSettings:
    """Attendance API endpoint settings."""
    base_url: str = DEFAULT_API_URL
    app_key: str = "360teams"
    user_agent: str = "Mozilla/5.0"
    timeout: float = 20


@dataclass
class FetchSettings:
    """Settings for pulling recent months."""
    lookback_months: int = 12
    cache_path: str = ""  # Empty = records_cache.json beside config.json


@dataclass
class UIPrefs:
    """Display preferences."""
    threshold: str = "10.5"    # 保留使用者輸入的原始字串
    chart_mode: str = "year"   # "year" 或 "month"


@dataclass
class OutputSettings:
    """Output settings for generated reports."""
    output_dir: str = ""  # Default empty = current directory
    excel_filename_pattern: str = "工時統計_{start}_{end}.xlsx"
    pdf_filename_pattern: str = "工時統計_{start}_{end}.pdf"
    generate_pdf: bool = True
    custom_font_path: str = ""  # Custom font path for PDF generation


@dataclass
class AppConfig:
    """Main application configuration container."""
    credentials: Credentials = field(default_factory=Credentials)
    api: ApiSettings = field(default_factory=ApiSettings)
    fetch: FetchSettings = field(default_factory=FetchSettings)
    ui_prefs: UIPrefs = field(default_factory=UIPrefs)
    output_settings: OutputSettings = field(default_factory=OutputSettings)


class ConfigManager:
    """
    Manages application configuration with JSON persistence.

    Responsibilities:
    - Load configuration from JSON file
    - Save configuration to JSON file
    - Provide default configuration
    - Convert between dataclass and dict representations
    """

    DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config.json"
    DEFAULT_CACHE_NAME = "records_cache.json"

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        self._config: AppConfig = AppConfig()

    @property
    def config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    @property
    def cache_path(self) -> Path:
        """Resolved path of the fetched-records cache."""
        if self._config.fetch.cache_path:
            return Path(self._config.fetch.cache_path)
        return self.config_path.parent / self.DEFAULT_CACHE_NAME

    def load(self) -> AppConfig:
        """Load configuration from JSON file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = self._dict_to_config(data)
            except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
                logger.warning(f"設定檔讀取失敗，改用預設值: {e}")
                self._config = AppConfig()
        else:
            self._config = AppConfig()
        return self._config

    def save(self) -> None:
        """Save current configuration to JSON file."""
        data = self._config_to_dict(self._config)
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.debug(f"設定已儲存: {self.config_path}")

    def update(self, section: str, **values) -> None:
        """
        Update fields of one configuration section and save.

        Raises:
            KeyError: If the section or a field does not exist
        """
        target = getattr(self._config, section, None)
        if target is None:
            raise KeyError(f"Unknown config section: {section}")
        for key, value in values.items():
            if not hasattr(target, key):
                raise KeyError(f"Unknown field '{key}' in section '{section}'")
            setattr(target, key, value)
        self.save()

    def _config_to_dict(self, config: AppConfig) -> dict:
        """Convert AppConfig dataclass to dictionary."""
        return {
            "credentials": {
                "em_code": config.credentials.em_code,
                "authorization": config.credentials.authorization
            },
            "api": {
                "base_url": config.api.base_url,
                "app_key": config.api.app_key,
                "user_agent": config.api.user_agent,
                "timeout": config.api.timeout
            },
            "fetch": {
                "lookback_months": config.fetch.lookback_months,
                "cache_path": config.fetch.cache_path
            },
            "ui_prefs": {
                "threshold": config.ui_prefs.threshold,
                "chart_mode": config.ui_prefs.chart_mode
            },
            "output_settings": {
                "output_dir": config.output_settings.output_dir,
                "excel_filename_pattern": config.output_settings.excel_filename_pattern,
                "pdf_filename_pattern": config.output_settings.pdf_filename_pattern,
                "generate_pdf": config.output_settings.generate_pdf,
                "custom_font_path": config.output_settings.custom_font_path
            }
        }

    @staticmethod
    def _build_section(cls, data: dict):
        """Build a section dataclass, keeping defaults for missing keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    def _dict_to_config(self, data: dict) -> AppConfig:
        """Convert dictionary to AppConfig dataclass."""
        return AppConfig(
            credentials=self._build_section(Credentials, data.get("credentials", {})),
            api=self._build_section(ApiSettings, data.get("api", {})),
            fetch=self._build_section(FetchSettings, data.get("fetch", {})),
            ui_prefs=self._build_section(UIPrefs, data.get("ui_prefs", {})),
            output_settings=self._build_section(
                OutputSettings, data.get("output_settings", {})
            )
        )
