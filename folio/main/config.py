import logging
import os
from enum import Enum
from typing import Any, Optional

import toml
from pydantic import BaseModel

from ..base.providers import AppConfig
from ..base.providers.cache import CacheConfig
from ..base.providers.database import AnalyticsConfig, DatabaseConfig
from ..base.providers.orchestration import OrchestrationConfig
from ..base.utils import deep_update

logger = logging.getLogger()


class FolioConfig:
    current_file_path = os.path.dirname(__file__)
    default_config_path = os.path.join(
        current_file_path, "..", "folio.toml"
    )

    REQUIRED_KEYS: dict[str, list] = {
        "app": [],
        "database": ["provider"],
        "cache": ["provider"],
        "analytics": ["window_days", "min_occurrences"],
        "orchestration": ["provider"],
    }

    app: AppConfig
    database: DatabaseConfig
    cache: CacheConfig
    analytics: AnalyticsConfig
    orchestration: OrchestrationConfig

    def __init__(self, config_data: dict[str, Any]):
        """
        :param config_data: dictionary of configuration parameters, merged
            over the packaged defaults
        """
        default_config = self.load_default_config()
        default_config = deep_update(default_config, config_data)

        for section, keys in FolioConfig.REQUIRED_KEYS.items():
            self._validate_config_section(default_config, section, keys)
            setattr(self, section, default_config[section])

        self.app = AppConfig.create(**self.app)  # type: ignore
        self.database = DatabaseConfig.create(**self.database, app=self.app)  # type: ignore
        self.cache = CacheConfig.create(**self.cache, app=self.app)  # type: ignore
        self.analytics = AnalyticsConfig.create(**self.analytics)  # type: ignore
        self.orchestration = OrchestrationConfig.create(
            **self.orchestration, app=self.app
        )  # type: ignore

    def _validate_config_section(
        self, config_data: dict[str, Any], section: str, keys: list
    ):
        if section not in config_data:
            raise ValueError(f"Missing '{section}' section in config")
        if missing_keys := [
            key for key in keys if key not in config_data[section]
        ]:
            raise ValueError(
                f"Missing required keys in '{section}' config: {', '.join(missing_keys)}"
            )

    @classmethod
    def from_toml(cls, config_path: Optional[str] = None) -> "FolioConfig":
        if config_path is None:
            config_path = FolioConfig.default_config_path

        with open(config_path, encoding="utf-8") as f:
            config_data = toml.load(f)

        return cls(config_data)

    def to_toml(self):
        config_data = {}
        for section in FolioConfig.REQUIRED_KEYS.keys():
            section_data = self._serialize_config(getattr(self, section))
            if isinstance(section_data, dict):
                section_data.pop("app", None)
            config_data[section] = section_data
        return toml.dumps(config_data)

    @classmethod
    def load_default_config(cls) -> dict:
        with open(FolioConfig.default_config_path, encoding="utf-8") as f:
            return toml.load(f)

    @staticmethod
    def _serialize_config(config_section: Any):
        if isinstance(config_section, dict):
            return {
                str(k): FolioConfig._serialize_config(v)
                for k, v in config_section.items()
                if k != "app"
            }
        elif isinstance(config_section, (list, tuple)):
            return [
                FolioConfig._serialize_config(item) for item in config_section
            ]
        elif isinstance(config_section, Enum):
            return config_section.value
        elif isinstance(config_section, BaseModel):
            data = config_section.model_dump(exclude_none=True)
            data.pop("app", None)
            return FolioConfig._serialize_config(data)
        else:
            return config_section

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "FolioConfig":
        if config_path := os.getenv("FOLIO_CONFIG_PATH") or config_path:
            logger.info(f"Loading configuration from {config_path}")
            return cls.from_toml(config_path)
        return cls.from_toml()
