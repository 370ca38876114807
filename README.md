# sysmonbot

sysmonbot is a small Linux daemon. At a fixed interval it reads a few host
metrics and posts a short HTML report to a Telegram chat. The report covers:

- CPU usage, worked out from `/proc/stat` as the change between two samples
  (the first report after start-up shows 0.0%)
- used and total memory in MB, read from `/proc/meminfo`
- used and total disk space of `/`, as `df -h` reports it
- the local timestamp

The library can also gather Docker information. It asks systemd whether the
`docker` service is active, lists all containers with `docker ps -a`, and runs
`docker stats` to get CPU, memory, network and block I/O figures for the
running ones. It can render this as a summary message or as a per-container
report.

## Installation

```
pip install .
```

sysmonbot needs Python 3.10 or newer. It has no third-party dependencies.

## Configuration

By default the configuration is read from `/etc/system-monitor/config.json`.
The file must be a JSON object that holds the bot token and the target chat
id, both as strings:

```json
{
  "telegram_token": "token",
  "chat_id": "123"
}
```

## Running

```
sysmonbot [--config PATH] [--interval SECONDS]
```

- `--config`: path of the JSON configuration file
  (default `/etc/system-monitor/config.json`)
- `--interval`: seconds between reports (default 1800, which is 30 minutes)

The command loads the configuration, then sends a host metrics report once per
interval until it is interrupted. Each message is also printed to standard
output. If a send fails, the error goes to standard error and the next cycle
runs as planned. If the configuration is missing or invalid, the command exits
with status 1. Ctrl-C stops it with status 0.

## Using the library

`sysmonbot.metrics` collects and formats metrics:

```python
from sysmonbot.metrics import (
    SystemMonitor,
    format_detailed_docker_report,
    format_metrics_message,
)

monitor = SystemMonitor()
metrics = monitor.collect_metrics()       # SystemMetrics
print(format_metrics_message(metrics))

containers = monitor.docker_containers()  # list[DockerContainer]
print(format_detailed_docker_report(containers))
```

`SystemMonitor` takes an optional `runner` callable, which runs shell commands,
plus the paths of the stat and meminfo files. This makes it usable against
canned data. The module also exposes the parsers it uses on its own:
`parse_meminfo`, `parse_df_output`, `parse_container_line`, `apply_stats` and
`CpuSampler.update`.

`sysmonbot.telegram` sends messages:

```python
from sysmonbot.telegram import TelegramClient, load_config

config = load_config("/etc/system-monitor/config.json")
body = TelegramClient(config).send_message("<b>hello</b>")
```

`send_message` posts the text with HTML parse mode and returns the raw
response body from the API. An error response from the API is also returned as
its body. `TelegramError` is raised only when the request cannot be made at
all. `load_config` raises `ConfigError` when the file is missing, is not valid
JSON, or lacks either string key.

`sysmonbot.app` holds the command: `format_report`, `run_cycle`, `run` and
`main`.

## What it does not do

- The `sysmonbot` command sends only the host metrics report. It does not post
  Docker status or the per-container report. Those are available only through
  `sysmonbot.metrics`.
- It sends no start-up or shutdown notice to the chat, and it does not retry a
  failed send.

## Tests

```
pip install .[test]
pytest
```