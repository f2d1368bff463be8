"""Base model for squadtrack data types.

Every model inherits from :class:`SquadBaseModel` which provides:

* ``frozen=True`` so frames and snapshots cannot be mutated once built.
* ``alias_generator=to_camel`` so models dump to the camelCase wire names
  used by the HTTP surface and MQTT mirror (``model_dump(by_alias=True)``)
  while Python code keeps snake_case attributes.
* ``populate_by_name=True`` so both spellings are accepted on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SquadBaseModel(BaseModel):
    """Base for squadtrack models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict:
        """Dump to a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
