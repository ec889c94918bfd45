"""Data models for drawing storage."""

import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .errors import InvalidDrawingIdError


class StorageLocation(str, Enum):
    """Where a drawing record was read from."""
    LOCAL = "local"


# Attributes that never reach the metadata file
NON_METADATA_FIELDS = {"content", "location"}


def validate_drawing_id(drawing_id: str) -> str:
    """Check that an id is safe to use as a file name stem."""
    if not drawing_id or not drawing_id.strip():
        raise InvalidDrawingIdError("Drawing id cannot be empty", drawing_id=drawing_id)
    if drawing_id in (".", ".."):
        raise InvalidDrawingIdError(f"Invalid drawing id: {drawing_id!r}", drawing_id=drawing_id)
    if any(sep in drawing_id for sep in ("/", "\\", "\x00")):
        raise InvalidDrawingIdError(
            f"Drawing id contains a path separator: {drawing_id!r}",
            drawing_id=drawing_id
        )
    return drawing_id


class Drawing(BaseModel):
    """A stored drawing. Metadata lives in ``<id>.i.json``, content in ``<id>.excalidraw``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    user_id: str = Field("", alias="userId")
    name: str = "Untitled"
    content: str = Field("", alias="data")
    thumbnail: str = ""  # Base64 thumbnail
    created_at: Optional[datetime.datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime.datetime] = Field(None, alias="updatedAt")
    is_public: bool = Field(False, alias="isPublic")
    location: Optional[StorageLocation] = Field(None, alias="inStorage")

    @field_validator("id")
    @classmethod
    def _check_id(cls, value: str) -> str:
        # Empty ids are allowed here; the store assigns one on save
        if value:
            validate_drawing_id(value)
        return value

    @field_validator("user_id", "name", "thumbnail", mode="before")
    @classmethod
    def _null_is_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _empty_timestamp_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=datetime.timezone.utc)
        return value

    @field_validator("location", mode="before")
    @classmethod
    def _unknown_location_is_unset(cls, value: Any) -> Any:
        # Older metadata files carry whatever backend wrote them
        if value not in (None, *[loc.value for loc in StorageLocation]):
            return None
        return value

    def to_metadata(self) -> Dict[str, Any]:
        """Encode everything except content, using the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True, exclude=NON_METADATA_FIELDS)

    @property
    def has_thumbnail(self) -> bool:
        return bool(self.thumbnail)

    def __str__(self) -> str:
        return f"{self.name} ({self.id or 'unsaved'})"
