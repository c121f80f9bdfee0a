"""
Simulation backends.

The replication loop is CPU-side; permutation work inside each
replication is delegated to the permutation backend named in the design.
"""

from permsim.simulation.backends.cpu import CPUSimulationBackend, CPUSweepBackend

__all__ = ["CPUSimulationBackend", "CPUSweepBackend"]
