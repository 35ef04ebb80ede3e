from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PlaybackStatus(str, Enum):
    stopped = "stopped"
    playing = "playing"
    paused = "paused"


class PlaybackState(BaseModel):
    """Snapshot of the engine handed to renderers and listeners."""

    model_config = ConfigDict(frozen=True)

    current_index: int
    status: PlaybackStatus
    speed: float
    highlight: Optional[tuple[int, int]] = None

    @property
    def is_playing(self) -> bool:
        return self.status is PlaybackStatus.playing
