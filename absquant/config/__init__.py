from absquant.config.base import ConfigBase
from absquant.config.run import Approach, Mode, RunConfiguration, validate_configuration
from absquant.config.tools import ToolConfig

__all__ = ["Approach", "ConfigBase", "Mode", "RunConfiguration", "ToolConfig", "validate_configuration"]
