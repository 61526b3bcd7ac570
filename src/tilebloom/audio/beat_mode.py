"""
Bloom/beat regime switching.

A two-state hysteresis machine. The track must stay above the "on"
threshold for a sustained dwell before beat mode engages, and below the
lower "off" threshold for its own dwell before it releases.
"""

import enum
import logging

from tilebloom.config import BeatModeTuning

logger = logging.getLogger(__name__)


class VisualMode(enum.Enum):
    BLOOM = "bloom"
    BEAT = "beat"


class BeatModeController:
    def __init__(self, tuning: BeatModeTuning | None = None):
        self.tuning = tuning or BeatModeTuning()
        self.reset()

    def reset(self):
        self.mode = VisualMode.BLOOM
        self.high_since: float | None = None
        self.low_since: float | None = None

    @property
    def beat_mode(self) -> bool:
        return self.mode is VisualMode.BEAT

    def update(self, fullness: float, now_ms: float) -> VisualMode:
        """
        Feed one fullness sample taken at now_ms.

        Returns:
            The mode after this sample.
        """
        t = self.tuning
        if not t.enabled:
            return self.mode

        if self.mode is VisualMode.BLOOM:
            if fullness > t.on_threshold:
                if self.high_since is None:
                    self.high_since = now_ms
                if now_ms - self.high_since > t.on_ms:
                    self.mode = VisualMode.BEAT
                    self.low_since = None
                    logger.debug("Beat mode on at %.0f ms (fullness %.2f)", now_ms, fullness)
            else:
                self.high_since = None
        else:
            if fullness < t.off_threshold:
                if self.low_since is None:
                    self.low_since = now_ms
                if now_ms - self.low_since > t.off_ms:
                    self.mode = VisualMode.BLOOM
                    self.high_since = None
                    logger.debug("Beat mode off at %.0f ms (fullness %.2f)", now_ms, fullness)
            else:
                self.low_since = None

        return self.mode
