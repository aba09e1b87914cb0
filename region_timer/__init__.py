"""Region timer service: tracks time spent per region with a single active timer."""

__version__ = "1.0.0"
