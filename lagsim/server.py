"""Relay server that gathers frame data from every client and fans it out."""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from lagsim.config import RunContext
from lagsim.duration import Duration, VirtualClock
from lagsim.errors import ProtocolViolation
from lagsim.events import SERVER
from lagsim.log import log_with_time
from lagsim.packets import DelayedPacket, FrameData, PacketQueue
from lagsim.registry import ClientRegistry


class Server:
    """Holds each frame's data until it may be released, then broadcasts it.

    Besides relaying, the server measures how much it delays the game:
    ideally a frame is fanned out exactly one frame duration after the
    previous one. Each client has up to one frame of *leeway* that absorbs
    late fan-outs; anything beyond that is recorded as permanent drift.
    """

    def __init__(self, registry: ClientRegistry, context: RunContext):
        self.registry = registry
        self.context = context
        self.client_ids = registry.ids()

        # Packets sent by clients that are still in the air.
        self.incoming_packets = PacketQueue()

        self.last_fan_out_time: Optional[Duration] = None
        # Received data keyed by (frame number, client id), in arrival order.
        self.waiting_packet_data: Dict[Tuple[int, int], FrameData] = {}

        # Server-wide accounting of the raw fan-out cadence.
        self.lag_leeway = context.single_frame_duration
        self.total_drift = Duration.ZERO
        self.frames_fanned_out = 0

    def tick(self, clock: VirtualClock):
        """Receive arrived data, then release every frame that is ready."""
        now = clock.now
        self._receive(now)

        ready = self._ready_frames()
        if not ready:
            return

        if self.last_fan_out_time is not None:
            self._account_drift(now)
        self.last_fan_out_time = now

        for frame_number, held_data in ready.items():
            self._log(now, f"fanning out frame {frame_number}", debug=True)
            self._fan_out(now, frame_number, held_data)

        for key in [key for key in self.waiting_packet_data if key[0] in ready]:
            del self.waiting_packet_data[key]

    def _receive(self, now: Duration):
        for packet in self.incoming_packets.pop_arrived(now):
            if len(packet.payload) != 1:
                raise ProtocolViolation(
                    f"client packets carry exactly one FrameData, got {len(packet.payload)}"
                )
            frame_data = packet.payload[0]
            if frame_data.from_client_id not in self.registry:
                raise ProtocolViolation(f"data from unknown client: {frame_data}")
            if frame_data.key in self.waiting_packet_data:
                raise ProtocolViolation(f"duplicate data held at the server: {frame_data}")

            self._log(now, f"received {frame_data}", debug=True)
            self.waiting_packet_data[frame_data.key] = frame_data
            self.registry.get(frame_data.from_client_id).server_data.received_data_at = now

    def _ready_frames(self) -> Dict[int, List[FrameData]]:
        """Frames that every client contributed to, or that fall in the start-up window."""
        by_frame: Dict[int, List[FrameData]] = defaultdict(list)
        for frame_data in self.waiting_packet_data.values():
            by_frame[frame_data.frame_number].append(frame_data)

        # Releasing early frames unconditionally avoids deadlocking the start-up handshake.
        barrier = self.registry.max_frame_delay()
        return {
            frame_number: held_data
            for frame_number, held_data in by_frame.items()
            if frame_number < barrier
            or {data.from_client_id for data in held_data} == self.client_ids
        }

    def _fan_out(self, now: Duration, frame_number: int, held_data: List[FrameData]):
        recorder = self.context.recorder
        for client in self.registry:
            one_way = client.ping.sample(self.context.rng, now) / 2
            packet = DelayedPacket(arrival_time=now + one_way, payload=tuple(held_data))
            client.incoming_packets.push(packet)
            recorder.interval(
                "to_client", now, packet.arrival_time, client.client_id, frame_number
            )
            recorder.drift_sample(now, client.client_id, client.server_data.total_drift)
        recorder.frame_advanced(now, SERVER, frame_number)
        self.frames_fanned_out += 1

    def _account_drift(self, now: Duration):
        frame = self.context.single_frame_duration
        since_last_fan_out = now - self.last_fan_out_time

        for client in self.registry:
            data = client.server_data
            # Time spent waiting on this client's own data is not the server's fault.
            elapsed_since_receiving = now - data.received_data_at
            delay = since_last_fan_out - elapsed_since_receiving
            data.lag_leeway, drift = absorb(data.lag_leeway, frame - delay, frame)
            data.total_drift += drift

        self.lag_leeway, drift = absorb(self.lag_leeway, frame - since_last_fan_out, frame)
        self.total_drift += drift

    def lagstat(self, now: Duration):
        """Print the drift and perceived lag of every client."""
        lines = [f"{client.client_id} - Drift: {client.server_data.total_drift}" for client in self.registry]
        self._log(now, "Lagstat:\n" + "\n".join(lines))
        lines = [f"{client.client_id} - {client.perceived_lag}" for client in self.registry]
        self._log(now, "Client-perceived lag:\n" + "\n".join(lines))

    def _log(self, now: Duration, text: str, debug: bool = False):
        if debug and not self.context.log_debug:
            return
        log_with_time(now, f"Server: {text}")


def absorb(leeway: Duration, change: Duration, limit: Duration) -> Tuple[Duration, Duration]:
    """Apply a leeway change, returning the clamped leeway and the drift it caused.

    Leeway stays within [0, limit]. A deficit below zero becomes (negative)
    drift; a surplus above the limit is discarded.
    """
    leeway = leeway + change
    if leeway < Duration.ZERO:
        return Duration.ZERO, leeway
    return min(leeway, limit), Duration.ZERO
