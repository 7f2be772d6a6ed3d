"""Base exception shared by CacheKit subsystems."""


class CacheDiffError(Exception):
    """Base class for CacheKit errors."""
