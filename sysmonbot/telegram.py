"""Configuration loading and message delivery through the Telegram Bot API."""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass

CONFIG_PATH = "/etc/system-monitor/config.json"
API_BASE = "https://api.telegram.org/bot"
DEFAULT_TIMEOUT = 30
PARSE_MODE = "HTML"


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


class TelegramError(Exception):
    """Raised when a message cannot be delivered to the Telegram API."""


@dataclass(frozen=True)
class Config:
    """Credentials needed to post to a Telegram chat."""

    telegram_token: str
    chat_id: str


def load_config(path: str = CONFIG_PATH) -> Config:
    """Read ``telegram_token`` and ``chat_id`` from a JSON file."""
    try:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    except OSError as exc:
        raise ConfigError(f"Cannot open config file {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must hold a JSON object")
    values = {}
    for key in ("telegram_token", "chat_id"):
        value = data.get(key)
        if not isinstance(value, str):
            raise ConfigError(f"Config key {key!r} must be a string")
        values[key] = value
    return Config(**values)


def encode_payload(chat_id: str, message: str) -> str:
    """Build the form body for a sendMessage call with HTML parse mode."""
    text = urllib.parse.quote(message, safe="")
    return f"chat_id={chat_id}&text={text}&parse_mode={PARSE_MODE}"


Transport = Callable[[str, str, float], str]


def _post(url: str, data: str, timeout: float) -> str:
    request = urllib.request.Request(
        url,
        data=data.encode("ascii"),
        method="POST",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as exc:
        # The API answers errors with a JSON body; the request itself went through.
        return exc.read().decode("utf-8", errors="replace")
    except OSError as exc:
        raise TelegramError(str(exc)) from exc


class TelegramClient:
    """Sends HTML messages to one chat through the Bot API."""

    def __init__(
        self,
        config: Config,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Transport = _post,
    ) -> None:
        self.config = config
        self.timeout = timeout
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{API_BASE}{self.config.telegram_token}/sendMessage"

    def send_message(self, message: str) -> str:
        """Post ``message`` and return the raw API response body."""
        payload = encode_payload(self.config.chat_id, message)
        try:
            return self._transport(self.url, payload, self.timeout)
        except TelegramError:
            raise
        except OSError as exc:
            raise TelegramError(str(exc)) from exc