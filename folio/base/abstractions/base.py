import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Type, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel

T = TypeVar("T", bound="FolioSerializable")


class FolioSerializable(BaseModel):
    @classmethod
    def from_dict(cls: Type[T], data: Union[dict[str, Any], str]) -> T:
        if isinstance(data, str):
            data = json.loads(data)
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump()
        return self._serialize_values(data)

    def to_json(self) -> str:
        data = self.to_dict()
        return json.dumps(data)

    @classmethod
    def from_json(cls: Type[T], json_str: str) -> T:
        return cls.model_validate_json(json_str)

    @staticmethod
    def _serialize_values(data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: FolioSerializable._serialize_values(v)
                for k, v in data.items()
            }
        elif isinstance(data, list):
            return [FolioSerializable._serialize_values(v) for v in data]
        elif isinstance(data, UUID):
            return str(data)
        elif isinstance(data, Enum):
            return data.value
        elif isinstance(data, (datetime, date)):
            return data.isoformat()
        else:
            return data

    class Config:
        arbitrary_types_allowed = True
        populate_by_name = True
