"""Restriction persistence: local cache in front of a record backend."""

from .backends import (
    InMemoryRestrictionBackend,
    RedisRestrictionBackend,
    RestrictionBackend,
    build_backend,
)
from .restrictions import RestrictionStore, decode_restriction, encode_restriction

__all__ = [
    "InMemoryRestrictionBackend",
    "RedisRestrictionBackend",
    "RestrictionBackend",
    "RestrictionStore",
    "build_backend",
    "decode_restriction",
    "encode_restriction",
]
