"""Periodic system metrics reporter that posts to Telegram."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Protocol

from sysmonbot.metrics import CpuSampler, current_timestamp, disk_info, memory_info
from sysmonbot.telegram import (
    CONFIG_PATH,
    ConfigError,
    TelegramClient,
    TelegramError,
    load_config,
)

INTERVAL = 1800


class _Sender(Protocol):
    def send_message(self, message: str) -> str: ...


class _Sampler(Protocol):
    def usage(self) -> float: ...


def format_report(
    cpu_usage: float,
    memory: tuple[int, int],
    disk: tuple[str, str],
    timestamp: str,
) -> str:
    """Render the host metrics as an HTML Telegram message."""
    used_mb, total_mb = memory
    disk_used, disk_total = disk
    return "".join(
        [
            "🖥️ <b>System Metrics Report</b>\n",
            "-------------------\n",
            f"📊 <b>CPU Usage:</b> {cpu_usage:.1f}%\n",
            f"🧠 <b>Memory Usage:</b> {used_mb}MB / {total_mb}MB\n",
            f"💾 <b>Disk Usage:</b> {disk_used} / {disk_total}\n",
            "📡 <b>Network:</b> Connected\n",
            f"⏰ <b>Timestamp:</b> {timestamp}\n",
        ]
    )


def run_cycle(client: _Sender, sampler: _Sampler) -> str:
    """Collect metrics once, send them, and return the message text."""
    message = format_report(sampler.usage(), memory_info(), disk_info(), current_timestamp())
    print("Sending system metrics...")
    print(message, flush=True)
    try:
        response = client.send_message(message)
    except TelegramError as exc:
        print(f"Send failed: {exc}", file=sys.stderr)
        print("Failed to send Telegram message", file=sys.stderr)
    else:
        print(f"Message sent successfully: {response}", flush=True)
    return message


def run(client: _Sender, interval: float = INTERVAL) -> None:
    """Report metrics every ``interval`` seconds, forever."""
    print(f"System Monitor started. Monitoring interval: {interval} seconds", flush=True)
    sampler = CpuSampler()
    while True:
        try:
            run_cycle(client, sampler)
        except Exception as exc:  # keep reporting on the next cycle
            print(f"Error collecting metrics: {exc}", file=sys.stderr)
        time.sleep(interval)


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        prog="sysmonbot", description="Send periodic system metrics to a Telegram chat."
    )
    parser.add_argument("--config", default=CONFIG_PATH, help="path of the JSON config file")
    parser.add_argument(
        "--interval", type=int, default=INTERVAL, help="seconds between reports"
    )
    args = parser.parse_args(argv)

    print("Starting System Monitor Application...", flush=True)
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"Error loading configuration: {exc}", file=sys.stderr)
        print("Failed to initialize system monitor", file=sys.stderr)
        return 1
    print("Configuration loaded successfully", flush=True)

    client = TelegramClient(config)
    try:
        run(client, args.interval)
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        print(f"System monitor error: {exc}", file=sys.stderr)
        return 1
    return 0