"""
API request schemas.
What it defines:
- The plan request payload
- Validation rules

And, the main purpose:
Ensure structured communication between client and server.
"""


from typing import Optional

from pydantic import BaseModel, Field

class PlanRequestBody(BaseModel):
    text: str = Field(..., min_length=1, description="The user's request as received")
    chat_id: Optional[str] = Field(None, description="Conversation the request belongs to")
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    audio_url: Optional[str] = None
