"""
Analysis layer: derived views of a finished run's history.

IMPORTANT: Not used by the engine. One-way derivation only.

- summarize_profile: fps statistics and an fps-vs-population fit
- estimate_breaking_point: population at which the fit reaches a target fps
"""

from swarmbench.analysis.profile import (
    ProfileSummary,
    estimate_breaking_point,
    history_arrays,
    summarize_profile,
)

__all__ = [
    "ProfileSummary",
    "estimate_breaking_point",
    "history_arrays",
    "summarize_profile",
]
