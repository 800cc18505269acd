"""
Cluster-wide aggregation of realtime metrics streams.

This module provides the ClusterMetricsAggregator which fans out one stream
per source, funnels every envelope through a single lock-protected merge and
keeps a running RealtimeMetrics view of the cluster.
"""

import asyncio
import copy
import logging
from typing import Dict, Optional

from ..models.options import MetricsOptions
from ..models.realtime import RealtimeMetrics
from ..streaming.client import MetricsClient
from ..validation import ErrorSeverity, handle_stream_error

logger = logging.getLogger(__name__)


class ClusterMetricsAggregator:
    """
    Running aggregate of RealtimeMetrics envelopes from many producers.

    Envelopes may arrive concurrently from several streams; merges are
    serialised by an asyncio.Lock so each envelope is applied atomically.
    A failing producer is recorded in the aggregate's errors and does not
    stop the others.
    """

    def __init__(self):
        self._current = RealtimeMetrics()
        self._lock = asyncio.Lock()
        self.envelopes_merged = 0
        self.failed_sources: Dict[str, Exception] = {}

    async def merge(self, envelope: RealtimeMetrics) -> None:
        """Merge one envelope into the running view."""
        async with self._lock:
            self._current.merge(envelope)
            self.envelopes_merged += 1

    async def record_error(self, source: str, error: Exception) -> None:
        """Fold a producer failure into the aggregate as ``"<source>: <error>"``."""
        async with self._lock:
            self._current.errors.append(f"{source}: {error}")
            self.failed_sources[source] = error

    async def _collect_one(self, name: str, client: MetricsClient,
                           options: MetricsOptions) -> int:
        try:
            delivered = await client.metrics(options, self.merge)
            logger.debug(f"Source '{name}' delivered {delivered} envelopes")
            return delivered
        except (asyncio.CancelledError, TimeoutError):
            raise
        except Exception as e:
            handle_stream_error(e, name, severity=ErrorSeverity.WARNING,
                                reraise=False, logger=logger)
            await self.record_error(name, e)
            return 0

    async def collect(self, sources: Dict[str, MetricsClient], options: MetricsOptions,
                      timeout: Optional[float] = None) -> RealtimeMetrics:
        """
        Stream from every source concurrently until each sends its final frame.

        Args:
            sources: Mapping of source name to client
            options: Options sent to every source
            timeout: Deadline in seconds for the whole collection

        Returns:
            Snapshot of the aggregate after all streams ended

        Raises:
            asyncio.CancelledError: If the collection is cancelled
            TimeoutError: If ``timeout`` elapses
        """
        logger.info(f"Collecting metrics from {len(sources)} sources: {', '.join(sources)}")
        async with asyncio.timeout(timeout):
            tasks = [
                asyncio.create_task(self._collect_one(name, client, options), name=f"metrics-{name}")
                for name, client in sources.items()
            ]
            try:
                counts = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        logger.info(
            f"Collected {sum(counts)} envelopes, "
            f"{len(self.failed_sources)} of {len(sources)} sources failed"
        )
        return self.snapshot()

    def snapshot(self) -> RealtimeMetrics:
        """Deep copy of the running aggregate."""
        return copy.deepcopy(self._current)

    def reset(self) -> None:
        """Discard the running aggregate."""
        self._current = RealtimeMetrics()
        self.envelopes_merged = 0
        self.failed_sources = {}
