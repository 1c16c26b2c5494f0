from toolkeeper.adapters.copilot.adapter import CopilotAdapter
from toolkeeper.adapters.copilot.paths import CopilotPaths

__all__ = ["CopilotAdapter", "CopilotPaths"]
