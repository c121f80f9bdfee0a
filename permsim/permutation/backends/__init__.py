"""
Permutation test backends.

CPUPermutationBackend is always available. GPUPermutationBackend needs
PyTorch and is imported lazily by the solver.
"""

from permsim.permutation.backends.cpu import CPUPermutationBackend

__all__ = ["CPUPermutationBackend"]
