"""
User resource model.

``User`` is what the store holds and what the API returns. ``UserPayload``
is what a client sends on POST/PUT: the three editable fields, each
possibly missing, and never an id.
"""

from dataclasses import dataclass, asdict
from typing import Any, Optional


class PayloadError(ValueError):
    """The request body is not a JSON object of the expected shape."""


@dataclass
class User:
    """A stored user. ``id`` is assigned by the store and never changes."""

    id: int
    name: str
    title: str
    email: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class UserPayload:
    """
    Client-supplied user fields, before validation.

    Missing fields are None; the validator reports them as required.
    """

    name: Optional[str] = None
    title: Optional[str] = None
    email: Optional[str] = None

    FIELDS = ("name", "title", "email")

    @classmethod
    def from_json(cls, data: Any) -> "UserPayload":
        """
        Build a payload from a decoded JSON body.

        Field names match case-insensitively ("Name" fills ``name``); when
        a body spells one field several ways, the last one wins. Any ``id``
        in the body is ignored.

        Raises:
            PayloadError: If data is not an object, or a field holds
                something other than a string or null.
        """
        if not isinstance(data, dict):
            raise PayloadError("Request body must be a JSON object.")

        by_name = {key.lower(): value for key, value in data.items()}

        values = {}
        for name in cls.FIELDS:
            value = by_name.get(name)
            if value is not None and not isinstance(value, str):
                raise PayloadError(f"Field '{name}' must be a string.")
            values[name] = value

        return cls(**values)
