"""Overlay-network gated control plane for a single host."""

__version__ = "0.1.0"
