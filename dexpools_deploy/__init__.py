"""Deployment scripts and build helpers for the DexPools contracts."""

__version__ = "0.1.0"
