"""
Decoding of the realtime metrics stream.

The metrics endpoint answers with a long-lived body carrying a sequence of
whitespace-delimited JSON objects, one RealtimeMetrics envelope each. The
decoder turns that body into one sink call per envelope, in arrival order,
and stops after the envelope marked final.

At most one frame is outstanding: a frame is decoded only after the sink has
returned for the previous one, so a sink may update shared aggregation state
without extra locking as long as a single stream feeds it.

State machine:
    IDLE -> STREAMING -> DONE | FAILED | CANCELLED
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import AsyncIterable, Awaitable, Callable, Iterable, List, Optional, Union

from pydantic import ValidationError

from ..models.realtime import RealtimeMetrics
from ..validation import StreamDecodeError, UnexpectedEndOfStreamError

logger = logging.getLogger(__name__)

MetricsSink = Callable[[RealtimeMetrics], Union[None, Awaitable[None]]]

_WHITESPACE = b" \t\r\n"
_OPEN = (ord("{"), ord("["))
_CLOSE = (ord("}"), ord("]"))
_QUOTE = ord('"')
_BACKSLASH = ord("\\")


class DecoderState(Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


class FrameScanner:
    """
    Split a byte stream into top-level JSON object frames.

    The scanner only tracks nesting depth and string/escape state; it does
    not validate the JSON itself. Structural bytes are ASCII and never occur
    inside multi-byte UTF-8 sequences, so scanning raw bytes is safe across
    arbitrary chunk boundaries.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._pos = 0          # next byte to scan
        self._start = -1       # start of the frame being scanned, -1 if none
        self._depth = 0
        self._in_string = False
        self._escaped = False
        self._frames: List[bytes] = []
        self.offset = 0        # stream offset of the buffer start

    def feed(self, data: bytes) -> None:
        """Append bytes and extract any frames they complete."""
        self._buffer.extend(data)
        self._scan()

    def next_frame(self) -> Optional[bytes]:
        """Pop the oldest complete frame, or None if more bytes are needed."""
        if self._frames:
            return self._frames.pop(0)
        return None

    @property
    def has_partial(self) -> bool:
        """Whether bytes of an incomplete frame are buffered."""
        return self._start >= 0

    def _scan(self) -> None:
        buf = self._buffer
        i = self._pos
        end = len(buf)
        while i < end:
            c = buf[i]
            if self._start < 0:
                if c in _WHITESPACE:
                    i += 1
                    continue
                if c != _OPEN[0]:
                    raise StreamDecodeError(
                        f"expected '{{' at stream offset {self.offset + i}, got {bytes([c])!r}",
                        offset=self.offset + i,
                    )
                self._start = i
            if self._in_string:
                if self._escaped:
                    self._escaped = False
                elif c == _BACKSLASH:
                    self._escaped = True
                elif c == _QUOTE:
                    self._in_string = False
            elif c == _QUOTE:
                self._in_string = True
            elif c in _OPEN:
                self._depth += 1
            elif c in _CLOSE:
                self._depth -= 1
                if self._depth == 0:
                    self._frames.append(bytes(buf[self._start:i + 1]))
                    self._start = -1
            i += 1

        # Drop consumed bytes so the buffer only holds the partial frame.
        keep_from = self._start if self._start >= 0 else i
        if keep_from:
            del buf[:keep_from]
            self.offset += keep_from
            i -= keep_from
            if self._start >= 0:
                self._start = 0
        self._pos = i


class MetricsStreamDecoder:
    """
    Single-use decode loop delivering RealtimeMetrics frames to a sink.

    Attributes:
        state: Current DecoderState
        frames_delivered: Number of envelopes handed to the sink
    """

    def __init__(self, source_name: str = "stream"):
        self.source_name = source_name
        self.state = DecoderState.IDLE
        self.frames_delivered = 0
        self._scanner = FrameScanner()

    def _begin(self) -> None:
        if self.state is not DecoderState.IDLE:
            raise RuntimeError(f"decoder for '{self.source_name}' already used (state: {self.state.value})")
        self.state = DecoderState.STREAMING
        logger.debug(f"Decoding metrics stream from '{self.source_name}'")

    def _decode(self, frame: bytes) -> RealtimeMetrics:
        try:
            return RealtimeMetrics.model_validate_json(frame)
        except ValidationError as e:
            raise StreamDecodeError(f"invalid metrics frame: {e}") from e

    def _finish_eof(self) -> None:
        where = "mid-frame" if self._scanner.has_partial else "before the final frame"
        raise UnexpectedEndOfStreamError(
            f"metrics stream from '{self.source_name}' ended {where} "
            f"after {self.frames_delivered} frames",
            frames_delivered=self.frames_delivered,
        )

    async def run(self, source: AsyncIterable[bytes], sink: MetricsSink) -> int:
        """
        Consume ``source`` until a final frame, delivering each to ``sink``.

        Args:
            source: Async iterable of body chunks
            sink: Called once per envelope; coroutine results are awaited
                  before the next frame is decoded

        Returns:
            Number of envelopes delivered

        Raises:
            UnexpectedEndOfStreamError: If the source ends before a final frame
            StreamDecodeError: If a frame is not a valid envelope
            asyncio.CancelledError, TimeoutError: If cancelled while waiting
                for bytes or while the sink runs
        """
        self._begin()
        try:
            chunks = source.__aiter__()
            while True:
                frame = self._scanner.next_frame()
                if frame is None:
                    try:
                        chunk = await chunks.__anext__()
                    except StopAsyncIteration:
                        self._finish_eof()
                    self._scanner.feed(chunk)
                    continue
                metrics = self._decode(frame)
                result = sink(metrics)
                if inspect.isawaitable(result):
                    await result
                self.frames_delivered += 1
                if metrics.final:
                    self.state = DecoderState.DONE
                    logger.debug(f"Metrics stream from '{self.source_name}' finished after {self.frames_delivered} frames")
                    return self.frames_delivered
        except (asyncio.CancelledError, TimeoutError):
            self.state = DecoderState.CANCELLED
            logger.info(f"Metrics stream from '{self.source_name}' cancelled after {self.frames_delivered} frames")
            raise
        except Exception:
            self.state = DecoderState.FAILED
            raise

    def run_sync(self, chunks: Iterable[bytes], sink: Callable[[RealtimeMetrics], None]) -> int:
        """Blocking variant of run() for file or in-memory sources."""
        self._begin()
        try:
            iterator = iter(chunks)
            while True:
                frame = self._scanner.next_frame()
                if frame is None:
                    chunk = next(iterator, None)
                    if chunk is None:
                        self._finish_eof()
                    self._scanner.feed(chunk)
                    continue
                metrics = self._decode(frame)
                sink(metrics)
                self.frames_delivered += 1
                if metrics.final:
                    self.state = DecoderState.DONE
                    return self.frames_delivered
        except Exception:
            self.state = DecoderState.FAILED
            raise
