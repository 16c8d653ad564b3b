from .models import (  # noqa: F401
    CONFIG_FILE_NAME,
    DATA_DIR_NAME,
    BatchSettings,
    IndexMode,
    LoggingSettings,
    LogLevel,
    ReadSettings,
    SearchSettings,
    SemanticSettings,
    Settings,
    TodoSettings,
    ToolSpec,
)
from .loader import load_settings  # noqa: F401
