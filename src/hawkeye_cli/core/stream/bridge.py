"""Producer/consumer bridge between the live response and the stream processor.

A daemon thread performs the blocking read of the fragment source and hands
each fragment, in order, to a bounded FIFO queue. A single foreground
consumer pulls one fragment at a time, feeds it to the ``StreamProcessor``
and yields the resulting blocks before pulling the next one. Only the
consumer ever touches processor state, so the processor needs no locking.

Cancellation is cooperative: the consumer stops pulling and drops its queue
reference. The reader thread is never joined or killed; it stops on its
own the next time it tries to hand off a fragment, or when the transport's
own teardown ends the read.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from typing import Deque, Iterable, Iterator, List, Optional

from hawkeye_cli.core.stream.models import InputFragment, OutputBlock
from hawkeye_cli.core.stream.processor import StreamProcessor

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 64
# How often blocked handoffs re-check the cancellation flag (seconds)
POLL_INTERVAL = 0.1


class _StreamEnd:
    """Marker: the source was exhausted normally."""


class _StreamFailure:
    """Marker: the source raised; carries the exception."""

    __slots__ = ("error",)

    def __init__(self, error: BaseException):
        self.error = error


_STREAM_END = _StreamEnd()


class StreamingBridge:
    """Runs one investigation stream through a ``StreamProcessor``.

    Example:
        bridge = StreamingBridge(client.stream_investigation(project, session, prompt))
        try:
            for block in bridge.blocks():
                renderer.render(block)
        except KeyboardInterrupt:
            for block in bridge.cancel():
                renderer.render(block)
    """

    def __init__(
        self,
        source: Iterable[InputFragment],
        processor: Optional[StreamProcessor] = None,
        *,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        poll_interval: float = POLL_INTERVAL,
    ):
        if queue_size < 1:
            raise ValueError(f"queue_size must be positive, got {queue_size}")
        self._source = source
        self._processor = processor or StreamProcessor()
        self._queue: Optional["queue.Queue[object]"] = queue.Queue(maxsize=queue_size)
        self._poll_interval = poll_interval
        self._cancelled = threading.Event()
        self._reader: Optional[threading.Thread] = None
        self._consumed = False
        # Blocks released by the processor but not yet handed to the consumer
        self._undelivered: Deque[OutputBlock] = deque()

    @property
    def processor(self) -> StreamProcessor:
        return self._processor

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def last_status(self) -> str:
        return self._processor.last_status()

    def start(self) -> None:
        """Start the background reader. Called implicitly by ``blocks()``."""
        if self._reader is not None:
            return
        handoff = self._queue
        if handoff is None:
            raise RuntimeError("Stream was cancelled before it started")

        self._reader = threading.Thread(
            target=self._read_source,
            args=(handoff,),
            name="hawkeye-stream-reader",
            daemon=True,
        )
        self._reader.start()

    def blocks(self) -> Iterator[OutputBlock]:
        """Yield output blocks in order until the stream ends or is cancelled.

        On normal end the processor's final flush is yielded too. If the
        reader failed, its exception is re-raised here and nothing buffered
        is flushed.
        """
        if self._consumed:
            raise RuntimeError("StreamingBridge.blocks() can only be consumed once")
        self._consumed = True
        if self._cancelled.is_set():
            return
        self.start()
        handoff = self._queue
        if handoff is None:
            return

        while not self._cancelled.is_set():
            try:
                item = handoff.get(timeout=self._poll_interval)
            except queue.Empty:
                continue

            if item is _STREAM_END:
                logger.debug("Stream ended; flushing processor")
                self._undelivered.extend(self._processor.flush())
                yield from self._drain()
                return
            if isinstance(item, _StreamFailure):
                raise item.error

            self._undelivered.extend(self._processor.process(item))  # type: ignore[arg-type]
            yield from self._drain()

    def cancel(self) -> List[OutputBlock]:
        """Stop consuming and return everything not yet delivered.

        That is any blocks of the current batch the consumer has not pulled
        yet, followed by the processor's final flush. The reader thread is
        abandoned, not interrupted. Calling ``cancel`` again returns an empty
        list.
        """
        if self._cancelled.is_set():
            return []
        logger.debug("Stream cancelled by consumer")
        self._cancelled.set()
        self._queue = None
        remaining = list(self._undelivered)
        self._undelivered.clear()
        remaining.extend(self._processor.flush())
        return remaining

    def _drain(self) -> Iterator[OutputBlock]:
        while self._undelivered and not self._cancelled.is_set():
            yield self._undelivered.popleft()

    # -- Reader thread --------------------------------------------------------

    def _read_source(self, handoff: "queue.Queue[object]") -> None:
        """Thread target: drain the source into *handoff*."""
        try:
            for fragment in self._source:
                if not self._offer(handoff, fragment):
                    logger.debug("Reader stopping: consumer cancelled")
                    return
        except Exception as exc:
            if self._cancelled.is_set():
                logger.debug("Ignoring reader error after cancellation: %s", exc)
                return
            logger.debug("Stream reader failed: %s", exc)
            self._offer(handoff, _StreamFailure(exc))
            return
        self._offer(handoff, _STREAM_END)

    def _offer(self, handoff: "queue.Queue[object]", item: object) -> bool:
        """Block until *item* is queued; False once the consumer has cancelled."""
        while not self._cancelled.is_set():
            try:
                handoff.put(item, timeout=self._poll_interval)
                return True
            except queue.Full:
                continue
        return False
