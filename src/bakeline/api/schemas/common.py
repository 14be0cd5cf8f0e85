"""Common Pydantic schemas for the Bakeline REST API."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys.

    Accepts either snake_case or camelCase input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class DeleteResult(BaseModel):
    """Outcome of a delete operation."""

    deleted: int
