# API module
from .endpoints import routers, get_monitor, get_protocol
from .errors import protocol_error_handler, transfer_error_handler

__all__ = ["routers", "get_monitor", "get_protocol", "protocol_error_handler", "transfer_error_handler"]
