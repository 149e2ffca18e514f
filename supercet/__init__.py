"""Supercet: local control plane for headless agent CLIs."""

__version__ = "0.1.0"
