"""
Shared compute infrastructure for permsim.

This module provides hardware detection, timing utilities and random
stream management that are shared across all domain-specific backends.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    device: Hardware detection and device selection
    timing: Execution timing utilities
    streams: Independent per-unit random generators (SeedSequence spawning)
"""

from permsim.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    get_cpu_info,
    select_device,
)
from permsim.core.compute.timing import Timer
from permsim.core.compute.streams import (
    as_seed_sequence,
    make_generator,
    replication_streams,
    spawn_sequences,
)

__all__ = [
    # Device detection
    "DeviceInfo",
    "detect_gpu",
    "get_cpu_info",
    "select_device",
    # Timing
    "Timer",
    # Random streams
    "as_seed_sequence",
    "make_generator",
    "replication_streams",
    "spawn_sequences",
]
