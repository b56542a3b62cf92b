"""Noise-reduction filters and helpers for planar video frames."""

__version__ = "0.1.0"

__all__ = [
    "formats",
    "rprop",
    "median",
    "symmetry",
    "neural",
    "saltpepper",
    "offsets",
    "variance",
    "veed",
]