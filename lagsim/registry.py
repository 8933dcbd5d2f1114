"""Id-indexed collection of the clients taking part in a run."""

from typing import TYPE_CHECKING, Dict, FrozenSet, Iterator, List

if TYPE_CHECKING:
    from lagsim.client import Client


class ClientRegistry:
    """Owns the clients of one run; everything else refers to them by id."""

    def __init__(self):
        self._clients: Dict[int, "Client"] = {}

    def add(self, client: "Client"):
        if client.client_id in self._clients:
            raise ValueError(f"duplicate client id {client.client_id}")
        self._clients[client.client_id] = client

    def get(self, client_id: int) -> "Client":
        return self._clients[client_id]

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._clients

    def ids(self) -> FrozenSet[int]:
        return frozenset(self._clients)

    def siblings_of(self, client_id: int) -> List["Client"]:
        """Every other client, in registration order."""
        return [client for cid, client in self._clients.items() if cid != client_id]

    def max_frame_delay(self) -> int:
        return max((client.frame_delay for client in self), default=0)

    def __iter__(self) -> Iterator["Client"]:
        return iter(self._clients.values())

    def __len__(self) -> int:
        return len(self._clients)
