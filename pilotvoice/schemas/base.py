"""Base schemas with common configuration."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator, model_serializer
from pydantic.alias_generators import to_camel

from pilotvoice.utils.datetime_helpers import ensure_utc, to_iso_utc


class BaseSchema(BaseModel):
    """Base schema with common configuration for all API responses."""

    model_config = ConfigDict(
        from_attributes=True,
    )

    @field_validator("*", mode="after")
    @classmethod
    def normalize_datetimes(cls, value):
        if isinstance(value, datetime):
            return ensure_utc(value)
        return value

    @model_serializer(mode="wrap")
    def serialize_model(self, handler):
        """Serialize model values with UTC ``Z`` datetimes.

        SQLite stores datetimes as naive strings, so naive values are treated as UTC.
        """

        def _convert(value):
            if isinstance(value, datetime):
                return to_iso_utc(value)
            if isinstance(value, list):
                return [_convert(item) for item in value]
            if isinstance(value, dict):
                return {key: _convert(item) for key, item in value.items()}
            return value

        data = handler(self)
        return {key: _convert(value) for key, value in data.items()}


class CamelSchema(BaseSchema):
    """Schema exposed with camelCase keys on the wire."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
