from .log import get_logger, reset_call_order, setup_root_logger

__all__ = ["get_logger", "reset_call_order", "setup_root_logger"]
