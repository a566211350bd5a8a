"""Booter serialization exports."""

from .booter_decoder import decode, decode_fork_context
from .booter_encoder import encode
from .booter_keys import FORMAT_VERSION

__all__ = ["FORMAT_VERSION", "decode", "decode_fork_context", "encode"]
