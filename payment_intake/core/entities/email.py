from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EmailRecord(BaseModel):
    """
    An email accepted by the email service.
    """

    email_id: Optional[int] = Field(None, description='Internal email ID')
    recipient: str = Field(..., description='Destination address')
    subject: str = Field(..., description='Subject line')
    message: str = Field(..., description='Plain-text body')
    created_at: Optional[datetime] = Field(
        None, description='Timestamp when the email was recorded'
    )

    model_config = ConfigDict(
        from_attributes=True,
    )
