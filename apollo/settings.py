"""
Service Configuration

Environment-driven settings for the HTTP service. Protocol parameters are
not configured here once the protocol exists; they are fixed at initialize.
"""
import os


def _flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Reads from env vars at construction time."""

    def __init__(self):
        self.LOG_LEVEL: str = os.environ.get("APOLLO_LOG_LEVEL", "INFO").upper()
        self.ENABLE_FAUCET: bool = _flag("APOLLO_ENABLE_FAUCET")
        # If set, the service initializes the protocol at startup with this authority
        self.BOOTSTRAP_AUTHORITY: str = os.environ.get("APOLLO_BOOTSTRAP_AUTHORITY", "")
        self.DENOMINATION_A: str = os.environ.get("APOLLO_DENOMINATION_A", "USDC")
        self.DENOMINATION_B: str = os.environ.get("APOLLO_DENOMINATION_B", "APH")
        self.FAST_CLAIM_THRESHOLD: int = int(os.environ.get("APOLLO_FAST_CLAIM_THRESHOLD", "500000"))


settings = Settings()


def get_settings() -> Settings:
    return settings
