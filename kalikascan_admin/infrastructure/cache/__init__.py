from .ttl_cache import MemoryTTLCache, RedisTTLCache

__all__ = ["MemoryTTLCache", "RedisTTLCache"]
