from typing import Any, Dict, Optional
from pydantic import BaseModel
from datetime import datetime

class TriggerCallRequest(BaseModel):
    """Body of POST /api/trigger-call. Phone is checked by the endpoint so a
    missing value maps to 400 rather than a schema error."""
    phone: Optional[str] = None
    name: Optional[str] = None
    code_word: Optional[str] = None
    emergency_name: Optional[str] = None
    emergency_phone: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    immediate: Optional[bool] = None

    def webhook_payload(self, shape: str = "full") -> Dict[str, Any]:
        if shape == "minimal":
            return {"phone": self.phone}
        return self.model_dump(mode="json", exclude_none=True)

class TriggerCallResponse(BaseModel):
    success: bool = True
