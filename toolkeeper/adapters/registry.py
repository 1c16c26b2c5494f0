import logging
from typing import Optional

from toolkeeper.adapters.base import IPlatformAdapter

logger = logging.getLogger(__name__)


class AdapterRegistry:
    def __init__(self) -> None:
        self._adapters: dict[str, IPlatformAdapter] = {}
        self._active_id: Optional[str] = None

    def register(self, adapter: IPlatformAdapter) -> None:
        self._adapters[adapter.adapter_id] = adapter
        if self._active_id is None:
            self._active_id = adapter.adapter_id

    def get(self, adapter_id: str) -> IPlatformAdapter:
        adapter = self._adapters.get(adapter_id)
        if adapter is None:
            available = ", ".join(sorted(self._adapters))
            raise KeyError(f"Unknown adapter: {adapter_id}. Available: {available}")
        return adapter

    def set_active(self, adapter_id: str) -> IPlatformAdapter:
        adapter = self.get(adapter_id)
        self._active_id = adapter_id
        logger.debug("active adapter: %s", adapter_id)
        return adapter

    @property
    def active(self) -> Optional[IPlatformAdapter]:
        if self._active_id is None:
            return None
        return self._adapters.get(self._active_id)

    def all(self) -> list[IPlatformAdapter]:
        return [self._adapters[key] for key in sorted(self._adapters)]

    def detect_active(self) -> Optional[IPlatformAdapter]:
        """Activate the first registered adapter whose agent is installed."""
        for adapter in self._adapters.values():
            if adapter.detect():
                self._active_id = adapter.adapter_id
                return adapter
        return self.active
