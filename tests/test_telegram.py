import io
import json
import urllib.error
import urllib.parse
from unittest import mock

import pytest

from sysmonbot.telegram import (
    Config,
    ConfigError,
    TelegramClient,
    TelegramError,
    encode_payload,
    load_config,
)


def _write(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    return str(path)


def test_load_config_reads_both_keys(tmp_path):
    path = _write(tmp_path, json.dumps({"telegram_token": "token", "chat_id": "12345"}))
    config = load_config(path)
    assert config == Config(telegram_token="token", chat_id="12345")


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(str(tmp_path / "absent.json"))


def test_load_config_invalid_json(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, "{not json"))


def test_load_config_missing_key(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, json.dumps({"telegram_token": "token"})))


def test_load_config_non_string_value(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, json.dumps({"telegram_token": "token", "chat_id": 5})))


def test_load_config_non_object(tmp_path):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, "[1, 2]"))


def test_encode_payload_simple():
    assert encode_payload("42", "hello world") == "chat_id=42&text=hello%20world&parse_mode=HTML"


def test_encode_payload_round_trips_message():
    message = "🖥️ <b>System Metrics Report</b>\n& more = 100%"
    payload = encode_payload("7", message)
    parsed = urllib.parse.parse_qs(payload)
    assert parsed["text"] == [message]
    assert parsed["chat_id"] == ["7"]
    assert parsed["parse_mode"] == ["HTML"]


def test_encode_payload_text_uses_only_unreserved_characters():
    payload = encode_payload("1", "<b>a/b?c=d&e</b>")
    text = payload.split("&")[1][len("text="):]
    allowed = set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~%")
    assert set(text) <= allowed


class _RecordingTransport:
    def __init__(self, reply="ok"):
        self.calls = []
        self.reply = reply

    def __call__(self, url, data, timeout):
        self.calls.append((url, data, timeout))
        return self.reply


def test_send_message_posts_to_bot_url():
    transport = _RecordingTransport(reply='{"ok":true}')
    client = TelegramClient(Config("token", "99"), transport=transport)
    result = client.send_message("hi there")
    assert result == '{"ok":true}'
    url, data, timeout = transport.calls[0]
    assert url == "https://api.telegram.org/bottoken/sendMessage"
    assert data == encode_payload("99", "hi there")
    assert timeout == 30


def test_send_message_wraps_os_errors():
    def failing(url, data, timeout):
        raise ConnectionError("unreachable")

    client = TelegramClient(Config("token", "1"), transport=failing)
    with pytest.raises(TelegramError):
        client.send_message("x")


def test_default_transport_network_failure_raises():
    client = TelegramClient(Config("token", "1"))
    with mock.patch("urllib.request.urlopen", side_effect=urllib.error.URLError("offline")):
        with pytest.raises(TelegramError):
            client.send_message("x")


def test_default_transport_returns_http_error_body():
    error = urllib.error.HTTPError(
        "https://api.telegram.org/bottoken/sendMessage",
        400,
        "Bad Request",
        {},
        io.BytesIO(b'{"ok":false}'),
    )
    client = TelegramClient(Config("token", "1"))
    with mock.patch("urllib.request.urlopen", side_effect=error):
        assert client.send_message("x") == '{"ok":false}'