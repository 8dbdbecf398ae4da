"""Authorization and state-transition core of a mutual-insurance protocol."""
from apollo.protocol.protocol import Protocol

__version__ = "1.0.0"

__all__ = ["Protocol", "__version__"]
