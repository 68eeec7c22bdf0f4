from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


class AlertMessage(BaseModel):
    """Everything that goes into one alert notification."""

    hostname: str = Field(..., description="Host the probe ran on")
    timestamp: datetime = Field(..., description="Local time of the run")
    alerts: List[str] = Field(
        default_factory=list,
        description="Alert lines in evaluation order (CPU, RAM, disks)",
    )

    def render(self) -> str:
        lines = [
            f"Server monitoring: {self.hostname}",
            f"Time: {self.timestamp.strftime(TIMESTAMP_FORMAT).rstrip()}",
            "Issues:",
        ]
        lines.extend(f"- {alert}" for alert in self.alerts)
        return "\n".join(lines)


class AlertPayload(BaseModel):
    """JSON body expected by the notification API."""

    chat_id: str
    message: str
    message_thread_id: Optional[str] = Field(
        default=None,
        description="Only sent when configured",
    )
