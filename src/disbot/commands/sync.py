"""
Registrar sync: push the compiled registry to Discord, one guild at a time.

Each sync is a bulk overwrite; commands missing from the payload are removed
from the guild by Discord. Guilds are synced independently, so one guild
failing (timeout, HTTP error) never blocks the others.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Protocol

import aiohttp

from disbot.errors import ConfigurationError, RegistrationError

from .registry import CommandRegistry
from .schema import compile_registry

logger = logging.getLogger(__name__)

__all__ = [
    "CommandRegistrar",
    "HttpRegistrar",
    "sync_all",
    "sync_guild",
    "DEFAULT_API_BASE",
]

DEFAULT_API_BASE = "https://discord.com/api/v10"
Payload = List[Dict[str, Any]]


class CommandRegistrar(Protocol):
    """Remote endpoint that replaces a guild's application commands."""

    async def replace_commands(self, application_id: str, guild_id: int | str, payload: Payload) -> Any:
        """Overwrite every command of ``guild_id`` with ``payload``."""


class HttpRegistrar:
    """Talks to Discord's bulk-overwrite guild commands route over aiohttp."""

    def __init__(
        self,
        token: str,
        *,
        api_base: str = DEFAULT_API_BASE,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        if not token or not token.strip():
            raise ConfigurationError("Missing environment variables: DISCORD_API_TOKEN")
        self._token = token.strip()
        self.api_base = api_base.rstrip("/")
        self._session = session

    def _url(self, application_id: str, guild_id: int | str) -> str:
        return f"{self.api_base}/applications/{application_id}/guilds/{guild_id}/commands"

    async def replace_commands(self, application_id: str, guild_id: int | str, payload: Payload) -> Any:
        url = self._url(application_id, guild_id)
        headers = {"Authorization": f"Bot {self._token}"}

        try:
            if self._session is not None:
                return await self._put(self._session, url, headers, guild_id, payload)
            async with aiohttp.ClientSession() as session:
                return await self._put(session, url, headers, guild_id, payload)
        except aiohttp.ClientError as exc:
            raise RegistrationError(guild_id, f"transport error: {exc}") from exc

    @staticmethod
    async def _put(
        session: aiohttp.ClientSession,
        url: str,
        headers: Dict[str, str],
        guild_id: int | str,
        payload: Payload,
    ) -> Any:
        async with session.put(url, json=payload, headers=headers) as resp:
            if resp.status >= 400:
                body = await resp.text()
                raise RegistrationError(
                    guild_id, f"HTTP {resp.status}: {body[:200]}", status=resp.status
                )
            return await resp.json()


def _retryable(exc: RegistrationError) -> bool:
    # 4xx other than rate limiting means the payload or credentials are wrong.
    return exc.status is None or exc.status == 429 or exc.status >= 500


async def sync_guild(
    registry: CommandRegistry,
    guild_id: int | str,
    registrar: CommandRegistrar,
    *,
    application_id: str | None,
    timeout: float = 10.0,
    retries: int = 3,
    backoff: float = 1.0,
) -> bool:
    """
    Replace the commands of one guild with the compiled ``registry``.

    :returns: ``True`` once the registrar acknowledged the payload, ``False``
        if every attempt failed.
    :raises ConfigurationError: If ``application_id`` is missing.
    """

    if not application_id or not str(application_id).strip():
        raise ConfigurationError("Missing environment variables: APPLICATION_ID")

    payload = compile_registry(registry)

    attempts = max(retries, 0) + 1
    for attempt in range(attempts):
        try:
            await asyncio.wait_for(
                registrar.replace_commands(str(application_id).strip(), guild_id, payload),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Command registration for guild %s timed out after %.1fs (attempt %d/%d)",
                guild_id,
                timeout,
                attempt + 1,
                attempts,
            )
        except RegistrationError as exc:
            logger.warning(
                "Command registration for guild %s failed (attempt %d/%d): %s",
                guild_id,
                attempt + 1,
                attempts,
                exc,
            )
            if not _retryable(exc):
                break
        else:
            logger.info("Registered %d command(s) for guild: %s", len(payload), guild_id)
            return True

        if attempt + 1 < attempts:
            await asyncio.sleep(backoff * (2 ** attempt))

    logger.error("Giving up on command registration for guild %s", guild_id)
    return False


async def sync_all(
    registry: CommandRegistry,
    guild_ids: Iterable[int | str],
    registrar: CommandRegistrar,
    *,
    application_id: str | None,
    timeout: float = 10.0,
    retries: int = 3,
    backoff: float = 1.0,
) -> Dict[int | str, bool]:
    """
    Sync every guild concurrently and return ``{guild_id: succeeded}``.

    :raises ConfigurationError: Before any request if ``application_id`` is missing.
    """

    if not application_id or not str(application_id).strip():
        raise ConfigurationError("Missing environment variables: APPLICATION_ID")

    targets = list(dict.fromkeys(guild_ids))

    async def _isolated(guild_id: int | str) -> bool:
        try:
            return await sync_guild(
                registry,
                guild_id,
                registrar,
                application_id=application_id,
                timeout=timeout,
                retries=retries,
                backoff=backoff,
            )
        except Exception:
            logger.exception("Unexpected error while syncing guild %s", guild_id)
            return False

    results = await asyncio.gather(*(_isolated(gid) for gid in targets))
    outcome = dict(zip(targets, results))

    failed = [gid for gid, ok in outcome.items() if not ok]
    if failed:
        logger.warning("Command sync failed for %d of %d guild(s): %s", len(failed), len(targets), failed)
    return outcome
