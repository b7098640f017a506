"""WebSocket streaming: transport, supervision and the public Stream API."""

from .channel import ChannelClosed, EventChannel
from .decoder import decode_envelope
from .dispatcher import Dispatcher, expand
from .registry import SubscriptionRegistry
from .stream import Stream, Subscription
from .supervisor import StreamState, StreamSupervisor, backoff_delay
from .transport import Connection, parse_envelope

__all__ = [
    "ChannelClosed",
    "Connection",
    "Dispatcher",
    "EventChannel",
    "Stream",
    "StreamState",
    "StreamSupervisor",
    "Subscription",
    "SubscriptionRegistry",
    "backoff_delay",
    "decode_envelope",
    "expand",
    "parse_envelope",
]
