"""Communication log schema (``communication-log.json``)."""

import random
import string
import time
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


def new_message_id() -> str:
    """Return an id of the form ``msg_<epochMillis>_<random6>``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"msg_{int(time.time() * 1000)}_{suffix}"


class CommunicationLogEntry(BaseModel):
    """One message between agents."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_message_id)
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())
    sender: str = Field(..., alias="from", description="Sending agent")
    recipient: str = Field(..., alias="to", description="Receiving agent or 'All Team'")
    message_type: str
    content: str
    priority: str = "normal"


class CommunicationLog(BaseModel):
    """Append-only log of agent communications."""

    log_version: str = "1.0.0"
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    messages: list[CommunicationLogEntry] = Field(default_factory=list)

    @classmethod
    def initial(cls) -> "CommunicationLog":
        """Create a log seeded with the team initialization message."""
        return cls(
            messages=[
                CommunicationLogEntry(
                    sender="Orchestrator AI",
                    recipient="All Team",
                    message_type="initialization",
                    content="AI development team initialized. Shared context is ready.",
                    priority="info",
                )
            ]
        )
