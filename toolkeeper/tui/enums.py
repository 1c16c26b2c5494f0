from enum import Enum

from toolkeeper.models import ConfigScope, ToolStatus


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


TOOL_STATUS_STYLE = {
    ToolStatus.ENABLED: UIStyle.GREEN.value,
    ToolStatus.DISABLED: UIStyle.DIM.value,
    ToolStatus.WARNING: UIStyle.YELLOW.value,
    ToolStatus.ERROR: UIStyle.RED.value,
}

SCOPE_STYLE = {
    ConfigScope.USER: UIStyle.BLUE.value,
    ConfigScope.PROJECT: UIStyle.CYAN.value,
    ConfigScope.LOCAL: UIStyle.MAGENTA.value,
    ConfigScope.MANAGED: UIStyle.DIM.value,
}
