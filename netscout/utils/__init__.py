"""NETscout Utils"""
from netscout.utils.logger     import get_logger, log, set_verbose
from netscout.utils.validators import parse_duration
from netscout.utils.constants  import PortStatus
from netscout.utils.config     import ScanConfig, ConfigError, load_config_file
__all__ = ["get_logger", "log", "set_verbose", "parse_duration", "PortStatus",
           "ScanConfig", "ConfigError", "load_config_file"]
