"""HTTP request pipeline, envelope handling and notifications."""

from .envelope import Enveloped, Raw, parse_body, read_body, unwrap
from .notifier import LoggingNotifier, Notifier, RecordingNotifier
from .pipeline import RequestPipeline
from .request import RequestSpec

__all__ = [
    "Enveloped",
    "LoggingNotifier",
    "Notifier",
    "Raw",
    "RecordingNotifier",
    "RequestPipeline",
    "RequestSpec",
    "parse_body",
    "read_body",
    "unwrap",
]
