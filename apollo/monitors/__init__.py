from .process_monitor import ClaimMonitor

__all__ = ["ClaimMonitor"]
