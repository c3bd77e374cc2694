"""Session recording: channel trackers, recorder and chart downsampling."""

from .errors import RecorderError, PermissionDeniedError, AlreadyRunningError
from .channels import ChannelTracker
from .downsample import downsample
from .recorder import StreamingSessionRecorder

__all__ = [
    "RecorderError",
    "PermissionDeniedError",
    "AlreadyRunningError",
    "ChannelTracker",
    "downsample",
    "StreamingSessionRecorder",
]
