import os


class Sync:
    def __init__(self, config: dict | None = None) -> None:
        sync_cfg = (config or {}).get("disbot", {}).get("sync", {})

        # Upper bound (seconds) for a single replace-all request.
        self.SYNC_TIMEOUT: float = float(sync_cfg.get("timeout", os.getenv("SYNC_TIMEOUT", "10")))
        # Attempts after the first one before a guild is reported as failed.
        self.SYNC_RETRIES: int = int(sync_cfg.get("retries", os.getenv("SYNC_RETRIES", "3")))
        # Base delay for exponential backoff between attempts.
        self.SYNC_BACKOFF: float = float(sync_cfg.get("backoff", os.getenv("SYNC_BACKOFF", "1.0")))
