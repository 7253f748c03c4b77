from __future__ import annotations

import logging
from typing import Any, Generic, Optional, TypeVar

from bizdash.domain.errors import NotFoundError, ValidationError

log = logging.getLogger(__name__)

T = TypeVar("T")


def require_text(value: Any, label: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{label} is required.")
    return text


def require_number(value: Any, label: str, minimum: float | None = None, strict: bool = False) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{label} is required.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number.") from None
    if minimum is not None:
        if strict and number <= minimum:
            raise ValidationError(f"{label} must be > {minimum:g}.")
        if not strict and number < minimum:
            raise ValidationError(f"{label} must be >= {minimum:g}.")
    return number


def require_int(value: Any, label: str, minimum: int | None = None, strict: bool = False) -> int:
    number = require_number(value, label, minimum, strict)
    if number != int(number):
        raise ValidationError(f"{label} must be a whole number.")
    return int(number)


def optional_int(value: Any, label: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_int(value, label, 0)


class ResourceService(Generic[T]):
    """
    List/create/update/delete for one API resource.
    Subclasses set `resource` and `label` and override `build_payload`.
    """

    resource: str = ""
    label: str = "Record"

    def __init__(self, repo):
        self.repo = repo

    def build_payload(self, data: dict, existing: Optional[T] = None) -> dict:
        raise NotImplementedError

    def list(self) -> list[T]:
        return self.repo.list(self.resource)

    def get(self, record_id: int) -> T:
        rec = self.repo.get(self.resource, int(record_id))
        if rec is None:
            raise NotFoundError(f"{self.label} not found.")
        return rec

    def create(self, data: dict) -> Optional[T]:
        payload = self.build_payload(dict(data))
        created = self.repo.create(self.resource, payload)
        log.info("%s_created id=%s", self.resource, getattr(created, "id", None))
        return created

    def update(self, record_id: int, data: dict, existing: Optional[T] = None) -> Optional[T]:
        if record_id is None:
            raise ValidationError(f"{self.label} id is required.")
        payload = self.build_payload(dict(data), existing)
        updated = self.repo.update(self.resource, int(record_id), payload)
        log.info("%s_updated id=%s", self.resource, record_id)
        return updated

    def delete(self, record_id: int) -> None:
        if record_id is None:
            raise ValidationError(f"{self.label} id is required.")
        self.repo.delete(self.resource, int(record_id))
        log.info("%s_deleted id=%s", self.resource, record_id)
