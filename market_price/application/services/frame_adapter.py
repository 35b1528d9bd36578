"""
Frame Adapter
=============
Unwraps inbound ticker frames and forwards the first data element to the
subscriber's callback.

Delivery is best effort: a frame that cannot be parsed or carries no data
(subscribe acknowledgements, error events, non-JSON text) is dropped without
invoking the callback and without raising.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

from ...core.logger import StructuredLogger

SubscriptionCallback = Callable[[Any], Any]


@dataclass(frozen=True)
class ParsedFrame:
    """A frame carrying one usable data element"""
    data: Any
    arg: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MalformedFrame:
    """A frame with nothing to deliver"""
    reason: str
    sample: str = ""


Frame = Union[ParsedFrame, MalformedFrame]


def _sample(raw: Any) -> str:
    return str(raw)[:200]


def parse_frame(raw: Any) -> Frame:
    """
    Decode ``raw`` (text, bytes or an already decoded mapping) into a Frame.

    A list ``data`` field is unwrapped to its first element; any other
    ``data`` value is used as is. Empty or missing data yields MalformedFrame.
    """
    payload = raw
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            return MalformedFrame("not utf-8 text", _sample(raw))

    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            return MalformedFrame("not json", _sample(raw))

    if not isinstance(payload, dict):
        return MalformedFrame("payload is not an object", _sample(raw))

    data = payload.get("data")
    if isinstance(data, list):
        data = data[0] if data else None
    if data is None:
        return MalformedFrame("no data element", _sample(raw))

    arg = payload.get("arg")
    return ParsedFrame(data=data, arg=arg if isinstance(arg, dict) else {})


class FrameAdapter:
    """
    Inbound-message handler wrapping a subscriber callback.

    The callback's return value is passed through, so coroutine callbacks are
    awaited by the socket that invokes the adapter.
    """

    def __init__(self, callback: SubscriptionCallback, logger: Optional[StructuredLogger] = None):
        self.callback = callback
        self.logger = logger
        self.delivered_frames = 0
        self.dropped_frames = 0

    def __call__(self, raw: Any) -> Any:
        frame = parse_frame(raw)

        if isinstance(frame, MalformedFrame):
            self.dropped_frames += 1
            if self.logger is not None:
                self.logger.debug("frame_adapter.frame_dropped", {
                    "reason": frame.reason,
                    "sample": frame.sample
                })
            return None

        self.delivered_frames += 1
        return self.callback(frame.data)


def adapt_callback(callback: SubscriptionCallback, logger: Optional[StructuredLogger] = None) -> FrameAdapter:
    return FrameAdapter(callback, logger=logger)
