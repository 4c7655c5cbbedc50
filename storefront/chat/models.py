from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, ConfigDict


class SendMessageIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: Optional[str] = None
    imageDataUrl: Optional[str] = None
    orderId: Optional[str] = None


@dataclass(frozen=True)
class ChatLimits:
    max_image_bytes: int
    history_limit: int
