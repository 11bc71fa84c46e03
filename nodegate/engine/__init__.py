from .access_gate import AccessGate, split_host_port
from .cpu_sampler import CpuSampler
from .peer_roster import CommandPeerRoster, PeerRoster, StaticPeerRoster

__all__ = [
    "AccessGate",
    "split_host_port",
    "CpuSampler",
    "CommandPeerRoster",
    "PeerRoster",
    "StaticPeerRoster",
]
