from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, PlainSerializer

# Decimal in Python, plain JSON number on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# Largest value a Numeric(14, 2) column holds.
MAX_MONEY = Decimal("999999999999.99")


class MessageResponse(BaseModel):
    message: str
