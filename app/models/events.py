"""Stream event models."""

from typing import Any, Literal

from pydantic import BaseModel

Channel = Literal["update", "token", "custom"]

# Wire names used in the ND-JSON "mode" field
CHANNEL_MODES: dict[str, str] = {
    "update": "updates",
    "token": "messages",
    "custom": "custom",
}


class StreamEvent(BaseModel):
    """One item of a multiplexed run stream."""

    channel: Channel
    payload: Any

    @property
    def mode(self) -> str:
        return CHANNEL_MODES[self.channel]
