# Copyright (c) 2026 The NeuroAura Authors. All rights reserved.
# Licensed under the Business Source License 1.1 (BSL-1.1)
# See LICENSE file in the project root for full license text.

"""
Haptic cue for the movement watcher.

No vibration motor on a desktop: the terminal bell stands in when stderr is
a tty, otherwise the cue is only logged.
"""

import logging
import sys
from enum import Enum
from typing import List

logger = logging.getLogger("neuroaura.interface.haptics")


class Feedback(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class TerminalHaptics:
    def __call__(self, feedback: Feedback) -> None:
        logger.info("Haptic cue: %s", feedback.value)
        if sys.stderr.isatty():
            sys.stderr.write("\a")
            sys.stderr.flush()


class RecordingHaptics:
    """Remembers every cue (tests)."""

    def __init__(self):
        self.cues: List[Feedback] = []

    def __call__(self, feedback: Feedback) -> None:
        self.cues.append(feedback)
