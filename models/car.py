# models/car.py
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Car(BaseModel):
    """
    One entry of the curated car list.

    Only ``orderNo`` and ``active`` are interpreted; every other field the
    admin tooling sends (make, model, price, images ...) is kept verbatim.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    order_no: str = Field(..., alias="orderNo")
    active: bool = True

    @field_validator("order_no", mode="before")
    @classmethod
    def _coerce_order_no(cls, v: Any) -> str:
        if v is None:
            raise ValueError("orderNo is required")
        v = str(v).strip()
        if not v:
            raise ValueError("orderNo is required")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with the on-disk (camelCase) key names."""
        return self.model_dump(by_alias=True)
