"""
RPC transport health metrics.

Per-peer breakdowns nest RPCMetrics values by destination and by caller.
The nesting is a finite tree (a peer never contains itself), so merging
recurses structurally.
"""

from typing import Dict, Optional

from pydantic import Field, StrictInt

from .base import OMIT_EMPTY, ZERO_TIME, Timestamp, WireModel
from .common import is_after


class RPCMetrics(WireModel):
    collected_at: Timestamp = Field(ZERO_TIME, alias="collectedAt")
    connected: StrictInt = 0
    reconnect_count: StrictInt = Field(0, alias="reconnectCount")
    disconnected: StrictInt = 0
    outgoing_streams: StrictInt = Field(0, alias="outgoingStreams")
    incoming_streams: StrictInt = Field(0, alias="incomingStreams")
    outgoing_bytes: StrictInt = Field(0, alias="outgoingBytes")
    incoming_bytes: StrictInt = Field(0, alias="incomingBytes")
    outgoing_messages: StrictInt = Field(0, alias="outgoingMessages")
    incoming_messages: StrictInt = Field(0, alias="incomingMessages")
    out_queue: StrictInt = Field(0, alias="outQueue")
    last_pong_time: Timestamp = Field(ZERO_TIME, alias="lastPongTime")
    last_ping_ms: float = Field(0.0, alias="lastPingMS")
    # Maximum across all merged entries.
    max_ping_dur_ms: float = Field(0.0, alias="maxPingDurMS")
    last_connect_time: Timestamp = Field(ZERO_TIME, alias="lastConnectTime")

    by_destination: Dict[str, "RPCMetrics"] = Field(
        default_factory=dict, alias="byDestination", json_schema_extra=OMIT_EMPTY
    )
    by_caller: Dict[str, "RPCMetrics"] = Field(
        default_factory=dict, alias="byCaller", json_schema_extra=OMIT_EMPTY
    )

    def merge(self, other: Optional["RPCMetrics"]) -> None:
        if other is None:
            return
        if is_after(other.collected_at, self.collected_at):
            self.collected_at = other.collected_at
        if is_after(other.last_connect_time, self.last_connect_time):
            self.last_connect_time = other.last_connect_time

        self.connected += other.connected
        self.disconnected += other.disconnected
        self.reconnect_count += other.reconnect_count
        self.outgoing_streams += other.outgoing_streams
        self.incoming_streams += other.incoming_streams
        self.outgoing_bytes += other.outgoing_bytes
        self.incoming_bytes += other.incoming_bytes
        self.outgoing_messages += other.outgoing_messages
        self.incoming_messages += other.incoming_messages
        self.out_queue += other.out_queue

        # Ping and pong time describe the same exchange; keep them together.
        if is_after(other.last_pong_time, self.last_pong_time):
            self.last_pong_time = other.last_pong_time
            self.last_ping_ms = other.last_ping_ms
        if self.max_ping_dur_ms < other.max_ping_dur_ms:
            self.max_ping_dur_ms = other.max_ping_dur_ms

        _merge_peers(self.by_destination, other.by_destination)
        _merge_peers(self.by_caller, other.by_caller)


def _merge_peers(into: Dict[str, RPCMetrics], other: Dict[str, RPCMetrics]) -> None:
    for peer, metrics in other.items():
        existing = into.get(peer)
        if existing is None:
            existing = into[peer] = RPCMetrics()
        existing.merge(metrics)
