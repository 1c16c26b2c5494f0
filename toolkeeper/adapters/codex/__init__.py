from toolkeeper.adapters.codex.adapter import CodexAdapter
from toolkeeper.adapters.codex.paths import CodexPaths

__all__ = ["CodexAdapter", "CodexPaths"]
