from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator


# ---------- Request models ----------

class PriceQuery(BaseModel):
    name: str = Field(..., min_length=1, description="Commodity/crop name (e.g., 'wheat')")

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


# ---------- Response models ----------

class PriceResult(BaseModel):
    commodity: str
    price: float = Field(..., ge=0, allow_inf_nan=False, description="Average price in `currency` per `unit`")
    currency: str = Field(..., description="Always INR for mandi prices")
    unit: str = Field(..., description="e.g. 'per kilogram'")

    @field_validator("price", mode="before")
    @classmethod
    def _numeric_only(cls, v: Any) -> Any:
        # bool is an int subclass and "25" would be coerced; neither is a price
        if isinstance(v, (bool, str)):
            raise ValueError("price must be a JSON number")
        return v

    @field_validator("currency")
    @classmethod
    def _inr_only(cls, v: str) -> str:
        v = v.strip().upper()
        if v != "INR":
            raise ValueError(f"unexpected currency {v!r}")
        return v


class PriceExplanation(BaseModel):
    explanation: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
