"""
Safety module for the AMR fleet.

Priority-by-identity collision policy.
"""

from amrfleet.safety.collision import CollisionPolicy, CollisionConfig, YieldEvent

__all__ = [
    "CollisionPolicy",
    "CollisionConfig",
    "YieldEvent",
]
