"""Chat stream decoding.

Responsibilities:
    - Reassemble protocol lines from arbitrarily chunked bodies
    - Decode `data:` frames into typed events, dropping malformed ones
    - Accumulate a turn's text, session id and sources for the caller
"""

from rag_client.streaming.events import EventDecoder, StreamEvent, decode_line
from rag_client.streaming.frames import FrameSplitter
from rag_client.streaming.session import ChatStreamSession

__all__ = ["ChatStreamSession", "EventDecoder", "FrameSplitter", "StreamEvent", "decode_line"]
