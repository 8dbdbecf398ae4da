from .machine import ClaimStateMachine

__all__ = ["ClaimStateMachine"]
