"""Strict schema baselines: unknown fields are rejected unless a model opts out."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StrictModel(BaseModel):
    """Base for response DTOs."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StrictRequestModel(StrictModel):
    """Base for request DTOs."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class DocumentModel(BaseModel):
    """
    Base for records embedded in stored documents.

    Stored and serialized with camelCase keys (``fullName``, ``waiverSigned``)
    while Python code uses snake_case attribute names.
    """

    model_config = ConfigDict(
        extra="ignore",
        validate_assignment=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
