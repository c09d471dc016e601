"""Typed records stored inside JSON columns.

Each record owns its serialization: ``to_dict`` produces what is written to
the column and ``from_dict`` accepts whatever was stored before, ignoring
unknown keys.
"""
from dataclasses import dataclass, asdict, fields
from typing import List, Optional


@dataclass
class BookingIntent:
    full_name: str
    email: str
    phone_number: str
    company_name: str
    preferred_contact_method: Optional[str] = None
    preferred_contact_time: Optional[str] = None
    preferred_start_date: Optional[str] = None
    message: Optional[str] = None
    warehouse_name: Optional[str] = None
    warehouse_address: Optional[str] = None
    warehouse_city: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> "BookingIntent":
        data = data or {}
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for required in ("full_name", "email", "phone_number", "company_name"):
            values.setdefault(required, "")
        return cls(**values)


class ImageListError(ValueError):
    pass


def normalize_images(value, limit: int = 5) -> List[str]:
    """Accept a list or a comma separated string of image paths."""
    if not value:
        return []
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [str(part).strip() for part in value if part is not None]
    else:
        raise ImageListError("images must be a list of paths")

    items = [i for i in items if i]
    if len(items) > limit:
        raise ImageListError(f"Maximum {limit} images allowed")
    return items


def normalize_visitors(value) -> List[str]:
    if not value:
        return []
    return [str(v) for v in value if v]
