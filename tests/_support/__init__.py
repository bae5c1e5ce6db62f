"""
Test support utilities for parcelspine tests.

Helpers that are not fixtures but are shared across test files, chiefly
ParcelBuilder for crafting parcel buffers.
"""

from tests._support.parcel_builder import ParcelBuilder

__all__ = ["ParcelBuilder"]
