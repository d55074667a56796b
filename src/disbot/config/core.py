import os
from typing import List

from disbot.errors import ConfigurationError


def _truthy(raw: object) -> bool:
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _split_entries(raw: str) -> List[str]:
    return [entry.strip() for entry in raw.split(",") if entry.strip()]


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("disbot", {})
        discord_cfg = cfg.get("discord", {})
        commands_cfg = cfg.get("commands", {})

        token_env = str(discord_cfg.get("token_env", "DISCORD_API_TOKEN"))
        app_env = str(discord_cfg.get("application_id_env", "APPLICATION_ID"))

        # TOKEN / CLIENTID are the variable names older deployments used.
        self.DISCORD_API_TOKEN: str | None = os.getenv(token_env) or os.getenv("TOKEN")
        self.APPLICATION_ID: str | None = (
            str(discord_cfg.get("application_id") or "")
            or os.getenv(app_env)
            or os.getenv("CLIENTID")
        )
        self.API_BASE: str = str(
            discord_cfg.get("api_base", os.getenv("DISCORD_API_BASE", "https://discord.com/api/v10"))
        ).rstrip("/")
        self.DEBUG: bool = _truthy(cfg.get("debug", os.getenv("DISBOT_DEBUG", "false")))

        self.COMMANDS_PACKAGE: str = str(
            commands_cfg.get("package", os.getenv("COMMANDS_PACKAGE", "disbot.commands.builtin"))
        )
        manifest_cfg = commands_cfg.get("manifest")
        if manifest_cfg:
            self.COMMAND_MANIFEST: List[str] = [str(entry) for entry in manifest_cfg]
        else:
            self.COMMAND_MANIFEST = _split_entries(os.getenv("COMMAND_MANIFEST", ""))

    def require_credentials(self) -> tuple[str, str]:
        """
        Return ``(application_id, token)`` or raise when either is unset.

        Called right before talking to the command registrar; the bot can
        still start and serve already-registered commands without them.
        """
        required = [
            ("APPLICATION_ID", self.APPLICATION_ID),
            ("DISCORD_API_TOKEN", self.DISCORD_API_TOKEN),
        ]
        missing = [name for name, val in required if not val or not str(val).strip()]
        if missing:
            raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")
        return str(self.APPLICATION_ID).strip(), str(self.DISCORD_API_TOKEN).strip()
