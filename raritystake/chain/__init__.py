"""
Chain environment: block clocks and a local deployment helper.
"""

from .clock import Clock, SystemClock, ManualClock


# LocalChain imports the staking contract, which itself needs the clocks
def __getattr__(name):
    if name == 'LocalChain':
        from .local import LocalChain
        return LocalChain
    raise AttributeError(f"module 'raritystake.chain' has no attribute {name!r}")

__all__ = [
    "Clock",
    "SystemClock",
    "ManualClock",
    "LocalChain",
]
