"""
swarmbench: a self-adjusting N-body CPU stress benchmark.

A swarm of mutually gravitating bodies keeps growing while the measured
frame rate says the host can take more:

- Every frame: one integration step over all pairs (sparsified at high load)
- Every sampling interval: measure fps, record it, add bodies
- At the end: score = work done × smoothness it was done at

The core never draws. A render surface receives a read-only view of the
swarm each frame.
"""

__version__ = "0.1.0"
