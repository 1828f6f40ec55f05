from __future__ import annotations
from decimal import Decimal
from typing import Annotated, Any, List

from pydantic import BeforeValidator, PlainSerializer


def _to_decimal(v: Any) -> Any:
    # floats go through str() so 0.1 stays 0.1
    if isinstance(v, float):
        return Decimal(str(v))
    return v


def normalize_images(v: Any) -> List[str]:
    """Catalog rows store images as a list, a single URL string, or nothing."""
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v.strip() else []
    return [str(x) for x in v if x]


# Decimal in Python, plain number in JSON responses
Amount = Annotated[
    Decimal,
    BeforeValidator(_to_decimal),
    PlainSerializer(float, return_type=float, when_used="json"),
]
Quantity = Amount
Images = Annotated[List[str], BeforeValidator(normalize_images)]
