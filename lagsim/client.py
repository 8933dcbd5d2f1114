"""A peer that advances frames in lockstep with its siblings via the server."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from lagsim.config import RunContext
from lagsim.duration import Duration, VirtualClock
from lagsim.errors import ProtocolViolation, SetupError
from lagsim.latency import LatencyDistribution
from lagsim.log import log_with_time
from lagsim.packets import DelayedPacket, FrameData, PacketQueue

if TYPE_CHECKING:
    from lagsim.registry import ClientRegistry
    from lagsim.server import Server

# Coarsest bucket first: a spike is counted in the first bucket it exceeds.
LAG_SPIKE_BUCKETS = (
    (Duration.milliseconds(20), "lag_spikes_over_20ms"),
    (Duration.milliseconds(15), "lag_spikes_over_15ms"),
    (Duration.milliseconds(10), "lag_spikes_over_10ms"),
    (Duration.milliseconds(5), "lag_spikes_over_5ms"),
)

# A client that has not advanced for this many frames is considered stuck.
HEALTHY_FRAME_LIMIT = 10


@dataclass
class ClientPerceivedLag:
    """Lag spikes as experienced by the player at one client."""

    total_lag_spikes: int = 0
    lag_spikes_over_5ms: int = 0
    lag_spikes_over_10ms: int = 0
    lag_spikes_over_15ms: int = 0
    lag_spikes_over_20ms: int = 0

    def record(self, lag: Duration, tick: Duration):
        """Classify one frame advance that came `lag` later than expected."""
        if lag <= tick:
            return
        self.total_lag_spikes += 1
        for threshold, counter in LAG_SPIKE_BUCKETS:
            if lag > threshold:
                setattr(self, counter, getattr(self, counter) + 1)
                break


@dataclass
class ServerData:
    """What the server tracks about a client."""

    lag_leeway: Duration
    total_drift: Duration = Duration.ZERO
    received_data_at: Duration = Duration.ZERO


class Client:
    """A peer that sends its frame data to the server and waits for everyone's."""

    def __init__(
        self,
        client_id: int,
        frame_delay: int,
        ping: LatencyDistribution,
        context: RunContext,
    ):
        if frame_delay < 0:
            raise ValueError(f"frame delay cannot be negative: {frame_delay}")
        self.client_id = client_id
        self.frame_delay = frame_delay
        self.ping = ping
        self.context = context

        self.server: Optional["Server"] = None
        self.registry: Optional["ClientRegistry"] = None

        # Packets fanned out by the server that are still in the air.
        self.incoming_packets = PacketQueue()

        self.frame_number = 0
        self.last_frame_number_sent: Optional[int] = None
        # When the current frame started.
        self.new_frame_timestamp = Duration.ZERO
        self.started = False
        self.data_for_next_frame_arrived_at: Optional[Duration] = None

        self.perceived_lag = ClientPerceivedLag()
        self.server_data = ServerData(lag_leeway=context.single_frame_duration)

    def attach(self, server: "Server", registry: "ClientRegistry"):
        """Wire this client to the server and to the registry of its siblings."""
        self.server = server
        self.registry = registry

    @property
    def siblings(self) -> List["Client"]:
        if self.registry is None:
            raise SetupError(f"client {self.client_id} has no sibling registry")
        return self.registry.siblings_of(self.client_id)

    @property
    def min_sibling_frame_delay(self) -> int:
        return min((sibling.frame_delay for sibling in self.siblings), default=self.frame_delay)

    @property
    def max_sibling_frame_delay(self) -> int:
        return max((sibling.frame_delay for sibling in self.siblings), default=0)

    @property
    def first_frame_to_send_from(self) -> int:
        """Clients with a smaller delay hold their data back so everyone starts together."""
        return max(self.max_sibling_frame_delay - self.frame_delay, 0)

    @property
    def start_offset(self) -> Duration:
        """Simulated time to wait before starting, relative to the least-delayed sibling."""
        min_delay = min(self.frame_delay, self.min_sibling_frame_delay)
        return self.context.single_frame_duration * ((self.frame_delay - min_delay) / 2)

    def tick(self, clock: VirtualClock):
        """Run one polling step of the client's state machine."""
        if self.server is None or self.registry is None:
            raise SetupError(f"client {self.client_id} was ticked before being attached")

        now = clock.now
        frame = self.context.single_frame_duration

        if now < self.start_offset:
            return
        if not self.started:
            self.started = True
            self.new_frame_timestamp = now
            if self.last_frame_number_sent is None:
                self._send_if_needed(now, self.frame_number + self.frame_delay)

        if now < self.new_frame_timestamp + frame:
            return

        if self.frame_delay == 0:
            # Without delay, input for the next frame exists only once it is due.
            self._send_if_needed(now, self.frame_number + 1)

        if self._has_data_for_next_frame(now):
            self._advance(now)
        else:
            self._log(now, "frame is lagged", debug=True)

        self._send_if_needed(now, self.frame_number + self.frame_delay)

    def _has_data_for_next_frame(self, now: Duration) -> bool:
        # Everybody first synchronizes on frame 0 + the maximum frame delay.
        sync_frame = max(self.max_sibling_frame_delay, self.frame_delay) - 1
        if self.frame_number < sync_frame:
            return True

        arrived = self.incoming_packets.pop_arrived_for_frame(now, self.frame_number + 1)
        if not arrived:
            return False
        if len(arrived) > 1:
            raise ProtocolViolation(
                f"client {self.client_id} received {len(arrived)} packets "
                f"for frame {self.frame_number + 1}; the server fans out each frame once"
            )
        packet = arrived[0]
        self.data_for_next_frame_arrived_at = packet.arrival_time
        self._log(now, f"received {packet}", debug=True)
        return True

    def _advance(self, now: Duration):
        frame = self.context.single_frame_duration
        recorder = self.context.recorder

        self.frame_number += 1
        lag = now - self.new_frame_timestamp - frame

        arrived_at = self.data_for_next_frame_arrived_at
        if arrived_at is not None:
            if now > arrived_at:
                recorder.interval("wait", arrived_at, now, self.client_id, self.frame_number)
            recorder.lag_sample(now, self.client_id, self.frame_number, lag)
        recorder.frame_advanced(now, self.client_id, self.frame_number)

        self.perceived_lag.record(lag, self.context.time_step)
        self.data_for_next_frame_arrived_at = None
        self.new_frame_timestamp = now
        self._log(now, "moved to next frame", debug=True)

    def _send_if_needed(self, now: Duration, target_frame: int):
        if target_frame - self.frame_delay < self.first_frame_to_send_from:
            return
        if self.last_frame_number_sent is not None and self.last_frame_number_sent >= target_frame:
            return
        self._send_to_server(now, target_frame)

    def _send_to_server(self, now: Duration, target_frame: int):
        one_way = self.ping.sample(self.context.rng, now) / 2
        packet = DelayedPacket(
            arrival_time=now + one_way,
            payload=(FrameData(target_frame, from_client_id=self.client_id),),
        )
        self.context.recorder.interval(
            "to_server", now, packet.arrival_time, self.client_id, target_frame
        )
        self.server.incoming_packets.push(packet)
        self.last_frame_number_sent = target_frame
        self._log(now, f"sending to server: {packet}", debug=True)

    def is_healthy(self, now: Duration) -> bool:
        """True if the client advanced a frame recently enough to rule out deadlock."""
        return now - self.new_frame_timestamp < self.context.single_frame_duration * HEALTHY_FRAME_LIMIT

    def _log(self, now: Duration, text: str, debug: bool = False):
        if debug and not self.context.log_debug:
            return
        log_with_time(now, f"Client {self.client_id} (frame {self.frame_number}): {text}")

    def __str__(self):
        return f"Client({self.client_id}, delay={self.frame_delay}, frame={self.frame_number})"
