"""Gateway order schemas."""
from pydantic import BaseModel


class GatewayOrder(BaseModel):
    id: str
    amount: int
    currency: str
    receipt: str | None = None
    status: str | None = None
    notes: dict[str, str] = {}
