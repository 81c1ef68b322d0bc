"""Ports - interfaces/protocols for external dependencies."""

from .kv_store import KeyValueStore
from .clock import Clock, IdGenerator

__all__ = [
    "KeyValueStore",
    "Clock",
    "IdGenerator",
]
