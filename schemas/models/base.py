"""
Shared pieces for models stored in MongoDB.

Documents carry their BSON ``_id`` as ``id``; everything else is stored under
the camelCase alias of each field.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator


def coerce_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError(f"Invalid ObjectId: {value!r}")


# Stays a real ObjectId for the driver, renders as a hex string in JSON.
DocumentId = Annotated[
    ObjectId,
    PlainValidator(coerce_object_id),
    PlainSerializer(str, when_used="json"),
]


class MongoBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[DocumentId] = Field(default=None, alias="_id")

    def to_mongo(self) -> dict:
        """Storage-shaped dict. An unset ``_id`` is left out so the server assigns one."""
        data = self.model_dump(by_alias=True)
        if data.get("_id") is None:
            data.pop("_id", None)
        return data

    @classmethod
    def from_mongo(cls, data: Optional[dict]):
        if data is None:
            return None
        return cls.model_validate(data)
