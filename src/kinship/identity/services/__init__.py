from .events import IdentityEventHook, LoggingEventHook, NullEventHook, RecordingEventHook
from .resolver import IdentityResolver

__all__ = [
    "IdentityEventHook",
    "IdentityResolver",
    "LoggingEventHook",
    "NullEventHook",
    "RecordingEventHook",
]
