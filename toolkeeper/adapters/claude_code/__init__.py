from toolkeeper.adapters.claude_code.adapter import ClaudeCodeAdapter
from toolkeeper.adapters.claude_code.paths import ClaudeCodePaths

__all__ = ["ClaudeCodeAdapter", "ClaudeCodePaths"]
