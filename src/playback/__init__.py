"""
Cursor and playback control over one replay session.
"""

from playback.controller import REJECT_NO_POSITION, ReplayController, Session
from playback.player import Player, SleepScheduler, playback_interval

__all__ = [
    "REJECT_NO_POSITION",
    "Player",
    "ReplayController",
    "Session",
    "SleepScheduler",
    "playback_interval",
]
