from __future__ import annotations

from typing import TypeVar

from sqlalchemy.orm import Session

from .errors import RecordNotFoundError

T = TypeVar("T")


def get_or_raise(session: Session, model: type[T], record_id: int) -> T:
    record = session.get(model, record_id)
    if record is None:
        raise RecordNotFoundError(model.__name__, record_id)
    return record
