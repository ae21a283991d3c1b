"""Live network traffic capture with per-packet output or a colour-coded terminal dashboard."""

__version__ = "0.1.0"
__all__ = ["__version__"]