"""Shared response envelopes."""
from __future__ import annotations

import math
from typing import Generic, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Paginated(BaseModel, Generic[T]):
    data: list[T]
    total: int
    page: int
    per_page: int
    last_page: int

    @classmethod
    def build(cls, items: Sequence, total: int, page: int, per_page: int) -> "Paginated[T]":
        return cls(
            data=list(items),
            total=total,
            page=page,
            per_page=per_page,
            last_page=max(1, math.ceil(total / per_page)) if per_page else 1,
        )
