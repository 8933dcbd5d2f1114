"""Frame data and the packets that carry it between endpoints."""

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from lagsim.duration import Duration


@dataclass(frozen=True)
class FrameData:
    """One client's contribution for one frame."""

    frame_number: int
    from_client_id: int

    @property
    def key(self) -> Tuple[int, int]:
        return (self.frame_number, self.from_client_id)

    def __str__(self):
        return f"FrameData(frame={self.frame_number}, client={self.from_client_id})"


@dataclass(frozen=True)
class DelayedPacket:
    """Frame data in flight until its arrival time."""

    arrival_time: Duration
    payload: Tuple[FrameData, ...]

    def __post_init__(self):
        if not self.payload:
            raise ValueError("a packet must carry at least one FrameData")
        frames = {data.frame_number for data in self.payload}
        if len(frames) != 1:
            raise ValueError(f"a packet carries data for one frame, got frames {sorted(frames)}")

    @property
    def frame_number(self) -> int:
        """Frame number of the first entry; every entry shares it."""
        return self.payload[0].frame_number

    def has_arrived(self, now: Duration) -> bool:
        return now >= self.arrival_time

    def __str__(self):
        entries = ", ".join(str(data) for data in self.payload)
        return f"Packet(arrival={self.arrival_time}, [{entries}])"


class PacketQueue:
    """Packets "in the air" towards one endpoint."""

    def __init__(self):
        self.packets: List[DelayedPacket] = []

    def push(self, packet: DelayedPacket):
        self.packets.append(packet)

    def pop_arrived(self, now: Duration) -> List[DelayedPacket]:
        """Remove and return every packet that has arrived."""
        return self._pop_where(lambda packet: packet.has_arrived(now))

    def pop_arrived_for_frame(self, now: Duration, frame_number: int) -> List[DelayedPacket]:
        """Remove and return arrived packets carrying data for one frame."""
        return self._pop_where(
            lambda packet: packet.has_arrived(now) and packet.frame_number == frame_number
        )

    def _pop_where(self, predicate) -> List[DelayedPacket]:
        removed = []
        kept = []
        for packet in self.packets:
            (removed if predicate(packet) else kept).append(packet)
        self.packets = kept
        return removed

    def __len__(self) -> int:
        return len(self.packets)

    def __iter__(self) -> Iterator[DelayedPacket]:
        return iter(self.packets)
