"""Booter file transport exports."""

from .booter_files import BooterFileTransport, HandOffState, load_booter_file

__all__ = ["BooterFileTransport", "HandOffState", "load_booter_file"]
