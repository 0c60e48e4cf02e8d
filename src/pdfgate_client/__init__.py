"""Typed Python client for the PDFGate document-processing API."""

from __future__ import annotations


__version__ = "0.1.0"

__all__ = ["__version__"]
