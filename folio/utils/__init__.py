from .logging_config import build_log_config, configure_logging

__all__ = ["build_log_config", "configure_logging"]
