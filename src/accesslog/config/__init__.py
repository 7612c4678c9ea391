from .settings import DEFAULT_FORMAT, LoggerConfig, Settings, get_settings

__all__ = ["DEFAULT_FORMAT", "LoggerConfig", "Settings", "get_settings"]
