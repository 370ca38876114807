"""Collection and formatting of host and Docker container metrics."""

from __future__ import annotations

import math
import re
import subprocess
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime

STAT_PATH = "/proc/stat"
MEMINFO_PATH = "/proc/meminfo"
DF_COMMAND = "df -h / | tail -1"
DOCKER_ACTIVE_COMMAND = "systemctl is-active docker 2>/dev/null"
DOCKER_PS_COMMAND = (
    'docker ps -a --format "{{.ID}}|{{.Names}}|{{.Image}}|{{.Status}}|{{.CreatedAt}}"'
    " 2>/dev/null"
)
DOCKER_STATS_FORMAT = '"{{.CPUPerc}}|{{.MemUsage}}|{{.NetIO}}|{{.BlockIO}}"'
IDLE_IO = "0B / 0B"
SEPARATOR = "-------------------\n"
MAX_LISTED_NAMES = 5

_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass
class SystemMetrics:
    """A snapshot of host and Docker state."""

    cpu_usage: float = 0.0
    memory_used_mb: int = 0
    memory_total_mb: int = 0
    disk_used: str = ""
    disk_total: str = ""
    timestamp: str = ""
    docker_running: bool = False
    container_count: int = 0
    container_names: list[str] = field(default_factory=list)


@dataclass
class DockerContainer:
    """One container as listed by ``docker ps``, with optional live stats."""

    id: str = ""
    name: str = ""
    image: str = ""
    status: str = ""
    created: str = ""
    cpu_percent: float = 0.0
    memory_usage: str = ""
    network_io: str = ""
    block_io: str = ""

    @property
    def running(self) -> bool:
        return "Up" in self.status


class CpuSampler:
    """Computes CPU usage from successive samples of the aggregate /proc/stat line."""

    def __init__(self) -> None:
        self._last: tuple[int, int, int, int] | None = None

    def update(self, stat_line: str) -> float:
        """Record a ``cpu`` line and return the busy percentage since the last one.

        The first sample only primes the sampler and yields 0.0.
        """
        tokens = stat_line.split()
        try:
            user, nice, system, idle = (int(tok) for tok in tokens[1:5])
        except ValueError as exc:
            raise ValueError(f"malformed cpu stat line: {stat_line!r}") from exc
        if len(tokens) < 5:
            raise ValueError(f"malformed cpu stat line: {stat_line!r}")

        previous = self._last
        self._last = (user, nice, system, idle)
        if previous is None or previous[0] == 0:
            return 0.0

        last_user, last_nice, last_system, last_idle = previous
        busy = (user - last_user) + (nice - last_nice) + (system - last_system)
        total = busy + (idle - last_idle)
        if total == 0:
            return math.nan
        return busy / total * 100

    def usage(self, stat_path: str = STAT_PATH) -> float:
        """Read the first line of ``stat_path`` and return the current usage."""
        try:
            with open(stat_path, encoding="ascii", errors="replace") as handle:
                line = handle.readline()
        except OSError:
            return 0.0
        return self.update(line)


def run_command(command: str) -> str:
    """Run a shell command and return its standard output, or "" if it cannot start."""
    try:
        completed = subprocess.run(
            command,
            shell=True,
            stdout=subprocess.PIPE,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError:
        return ""
    return completed.stdout or ""


def _leading_int(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        return 0


def parse_meminfo(text: str) -> tuple[int, int]:
    """Return ``(used_mb, total_mb)`` from the contents of /proc/meminfo."""
    total_kb = 0
    available_kb = 0
    for line in text.splitlines():
        tokens = line.split()
        if len(tokens) < 2:
            continue
        if line.startswith("MemTotal:"):
            total_kb = _leading_int(tokens[1])
        elif line.startswith("MemAvailable:"):
            available_kb = _leading_int(tokens[1])
    total_mb = total_kb // 1024
    return total_mb - available_kb // 1024, total_mb


def memory_info(path: str = MEMINFO_PATH) -> tuple[int, int]:
    """Return ``(used_mb, total_mb)``, or ``(0, 0)`` when the file cannot be read."""
    try:
        with open(path, encoding="ascii", errors="replace") as handle:
            text = handle.read()
    except OSError:
        return 0, 0
    return parse_meminfo(text)


def parse_df_output(text: str) -> tuple[str, str]:
    """Return ``(used, size)`` from one line of ``df -h`` output."""
    if not text:
        return "N/A", "N/A"
    tokens = text.split() + ["", "", ""]
    return tokens[2], tokens[1]


def disk_info() -> tuple[str, str]:
    """Return ``(used, size)`` of the root filesystem as reported by df."""
    return parse_df_output(run_command(DF_COMMAND))


def current_timestamp() -> str:
    """Return the local time as ``YYYY-MM-DD HH:MM:SS``."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _pipe_fields(line: str, count: int) -> list[str]:
    parts = line.split("|")[:count]
    return parts + [""] * (count - len(parts))


def parse_container_line(line: str) -> DockerContainer:
    """Parse an ``ID|Names|Image|Status|CreatedAt`` line from docker ps."""
    cid, name, image, status, created = _pipe_fields(line, 5)
    return DockerContainer(id=cid, name=name, image=image, status=status, created=created)


def _parse_percent(text: str) -> float:
    match = _LEADING_NUMBER.match(text.replace("%", ""))
    if match is None:
        return 0.0
    return float(match.group(1))


def apply_stats(container: DockerContainer, stats: str) -> DockerContainer:
    """Return a copy of ``container`` filled in from a docker stats line.

    An empty ``stats`` string leaves the container unchanged.
    """
    if not stats:
        return container
    cpu, memory, network, block = _pipe_fields(stats.rstrip("\r\n"), 4)
    return replace(
        container,
        cpu_percent=_parse_percent(cpu),
        memory_usage=memory,
        network_io=network,
        block_io=block,
    )


class SystemMonitor:
    """Gathers host metrics and Docker container information."""

    def __init__(
        self,
        runner: Callable[[str], str] = run_command,
        sampler: CpuSampler | None = None,
        stat_path: str = STAT_PATH,
        meminfo_path: str = MEMINFO_PATH,
    ) -> None:
        self._run = runner
        self.sampler = sampler if sampler is not None else CpuSampler()
        self.stat_path = stat_path
        self.meminfo_path = meminfo_path

    def docker_running(self) -> bool:
        """Report whether systemd says the docker service is active."""
        return "active" in self._run(DOCKER_ACTIVE_COMMAND)

    def docker_containers(self) -> list[DockerContainer]:
        """List all containers, with live stats for the running ones."""
        if not self.docker_running():
            return []
        listing = self._run(DOCKER_PS_COMMAND)
        containers = []
        for line in listing.split("\n"):
            if not line:
                continue
            container = parse_container_line(line)
            if container.running:
                stats = self._run(
                    f"docker stats --no-stream --format {DOCKER_STATS_FORMAT} "
                    f"{container.id} 2>/dev/null"
                )
                container = apply_stats(container, stats)
            else:
                container = replace(
                    container,
                    cpu_percent=0.0,
                    memory_usage=IDLE_IO,
                    network_io=IDLE_IO,
                    block_io=IDLE_IO,
                )
            containers.append(container)
        return containers

    def collect_metrics(self) -> SystemMetrics:
        """Take a full snapshot of host and Docker state."""
        cpu = self.sampler.usage(self.stat_path)
        used_mb, total_mb = memory_info(self.meminfo_path)
        disk_used, disk_total = parse_df_output(self._run(DF_COMMAND))
        timestamp = current_timestamp()
        running = self.docker_running()
        containers = self.docker_containers()
        return SystemMetrics(
            cpu_usage=cpu,
            memory_used_mb=used_mb,
            memory_total_mb=total_mb,
            disk_used=disk_used,
            disk_total=disk_total,
            timestamp=timestamp,
            docker_running=running,
            container_count=len(containers),
            container_names=[c.name for c in containers],
        )


def format_metrics_message(metrics: SystemMetrics) -> str:
    """Render a metrics snapshot as an HTML Telegram message."""
    parts = [
        "🖥️ <b>System Metrics Report</b>\n",
        SEPARATOR,
        f"📊 <b>CPU Usage:</b> {metrics.cpu_usage:.1f}%\n",
        f"🧠 <b>Memory Usage:</b> {metrics.memory_used_mb}MB / {metrics.memory_total_mb}MB\n",
        f"💾 <b>Disk Usage:</b> {metrics.disk_used} / {metrics.disk_total}\n",
        f"🐳 <b>Docker Status:</b> {'Active' if metrics.docker_running else 'Inactive'}\n",
        f"📦 <b>Containers:</b> {metrics.container_count} total\n",
    ]
    names = metrics.container_names
    if names:
        parts.append("🏷️ <b>Container Names:</b>\n")
        parts.extend(f"   • {name}\n" for name in names[:MAX_LISTED_NAMES])
        if len(names) > MAX_LISTED_NAMES:
            parts.append(f"   • ... and {len(names) - MAX_LISTED_NAMES} more\n")
    parts.append("📡 <b>Network:</b> Connected\n")
    parts.append(f"⏰ <b>Timestamp:</b> {metrics.timestamp}\n")
    return "".join(parts)


def _container_section(container: DockerContainer) -> Iterable[str]:
    yield f"🏷️ <b>{container.name}</b>\n"
    yield f"   📋 ID: {container.id[:12]}\n"
    yield f"   🖼️ Image: {container.image}\n"
    yield f"   ⚡ Status: {container.status}\n"
    if container.running:
        yield f"   💻 CPU: {container.cpu_percent:.1f}%\n"
        yield f"   🧠 Memory: {container.memory_usage}\n"
        yield f"   🌐 Network I/O: {container.network_io}\n"
        yield f"   💿 Block I/O: {container.block_io}\n"
    yield f"   📅 Created: {container.created}\n"
    yield "\n"


def format_detailed_docker_report(containers: list[DockerContainer]) -> str:
    """Render a per-container report as an HTML Telegram message."""
    if not containers:
        return "🐳 <b>Docker Container Report</b>\n" + SEPARATOR + "No containers found."
    parts = [
        "🐳 <b>Docker Container Report</b>\n",
        SEPARATOR,
        f"📦 <b>Total Containers:</b> {len(containers)}\n\n",
    ]
    for container in containers:
        parts.extend(_container_section(container))
    return "".join(parts)