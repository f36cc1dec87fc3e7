from abc import ABC, abstractmethod
from typing import Any, Optional, Type

from pydantic import BaseModel


class AppConfig(BaseModel):
    project_name: Optional[str] = None
    environment: str = "development"
    autocomplete_default_limit: int = 10
    autocomplete_max_limit: int = 20
    popular_default_limit: int = 10
    popular_max_limit: int = 20

    class Config:
        populate_by_name = True
        ignore_extra = True

    @classmethod
    def create(cls, **kwargs: Any) -> "AppConfig":
        base_args = cls.model_fields.keys()
        return cls(**{k: v for k, v in kwargs.items() if k in base_args})


class ProviderConfig(BaseModel, ABC):
    """A base provider configuration class."""

    app: AppConfig = AppConfig()
    extra_fields: dict[str, Any] = {}
    provider: Optional[str] = None

    class Config:
        populate_by_name = True
        arbitrary_types_allowed = True
        ignore_extra = True

    @abstractmethod
    def validate_config(self) -> None:
        pass

    @classmethod
    def create(cls: Type["ProviderConfig"], **kwargs: Any) -> "ProviderConfig":
        base_args = cls.model_fields.keys()
        filtered_kwargs = {
            k: v if v != "None" else None
            for k, v in kwargs.items()
            if k in base_args
        }
        instance = cls(**filtered_kwargs)  # type: ignore
        for k, v in kwargs.items():
            if k not in base_args:
                instance.extra_fields[k] = v
        return instance

    @property
    @abstractmethod
    def supported_providers(self) -> list[str]:
        """Define a list of supported providers."""
        pass

    @classmethod
    def from_dict(
        cls: Type["ProviderConfig"], data: dict[str, Any]
    ) -> "ProviderConfig":
        """Create a new instance of the config from a dictionary."""
        return cls.create(**data)


class Provider(ABC):
    """A base provider class to provide a common interface for all
    providers."""

    def __init__(self, config: ProviderConfig, *args, **kwargs):
        if config:
            config.validate_config()
        self.config = config
