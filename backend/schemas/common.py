from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every payload: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class OrmModel(CamelModel):
    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    message: str


def dump_updates(payload: BaseModel, *, nullable: Iterable[str] = ()) -> dict[str, Any]:
    """Return the fields a PATCH body actually set.

    An explicit ``null`` only clears columns listed in ``nullable``; for every
    other column it is treated as "not provided".
    """

    allowed_null = set(nullable)
    updates = payload.model_dump(exclude_unset=True)
    return {k: v for k, v in updates.items() if v is not None or k in allowed_null}
