from toolkeeper.adapters.base import AdapterId, IPlatformAdapter
from toolkeeper.adapters.registry import AdapterRegistry

__all__ = ["AdapterId", "AdapterRegistry", "IPlatformAdapter"]
