"""A simulated boundary-tag heap allocator with an explicit free list, coalescing and a benchmark."""

__version__ = "0.1.0"
__all__ = ["heap", "bench"]