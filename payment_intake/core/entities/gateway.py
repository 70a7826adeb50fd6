from typing import Optional

from pydantic import BaseModel, Field


class GatewayCharge(BaseModel):
    charge_id: Optional[str] = Field(
        None, description='Charge identifier issued by the gateway'
    )
    status: str = Field(..., description='Terminal status of the charge')
