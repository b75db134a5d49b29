"""Per-app CPU and memory usage, attached to enumerated windows.

Processes are grouped by app name.  Helper processes spawned by multi-process
apps ("Google Chrome Helper (Renderer)", "Slack Helper") are folded into the
owning app so the figures line up with the accessibility process names.

``psutil`` reports CPU percent relative to the previous call on the same
process, so a sample primes every process, waits ``interval`` seconds and
reads again.  The wait happens in a worker thread.
"""

from __future__ import annotations

import asyncio
import functools
import platform
import re
import time
from dataclasses import dataclass, field

import psutil

from window_bridge.logging import get_logger
from window_bridge.protocol.models import CpuInfo, ProcessInfo, WindowInfo

log = get_logger(__name__)

_HELPER_RE = re.compile(r"\s+Helper(\s*\(.*\))?$")
_MB = 1024 * 1024


@dataclass
class AppUsage:
    cpu_percent: float = 0.0
    memory_mb: float = 0.0
    process_count: int = 0


@dataclass
class ResourceSample:
    apps: dict[str, AppUsage] = field(default_factory=dict)
    cpu_info: CpuInfo = field(default_factory=CpuInfo)


def normalize_app_name(process_name: str) -> str:
    return _HELPER_RE.sub("", process_name).strip() or process_name


@functools.lru_cache(maxsize=1)
def cpu_model() -> str:
    return platform.processor() or platform.machine() or "Unknown"


class ResourceSampler:
    """Samples ``psutil`` processes and aggregates them per app name."""

    def __init__(self, interval: float = 0.2, top_n: int = 5) -> None:
        self._interval = interval
        self._top_n = top_n

    def _prime(self) -> list[psutil.Process]:
        primed = []
        for proc in psutil.process_iter(["pid", "name"]):
            try:
                if not proc.info.get("name"):
                    continue
                proc.cpu_percent(None)
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
            primed.append(proc)
        psutil.cpu_percent(None)
        return primed

    def _read(self, procs: list[psutil.Process]) -> list[ProcessInfo]:
        processes = []
        for proc in procs:
            try:
                cpu = proc.cpu_percent(None)
                memory = proc.memory_info()
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
            processes.append(
                ProcessInfo(
                    pid=proc.info["pid"],
                    name=proc.info["name"],
                    cpu_usage=round(cpu or 0.0, 1),
                    memory_usage=round(memory.rss / _MB, 1) if memory is not None else 0.0,
                )
            )
        return processes

    def _collect(self) -> ResourceSample:
        procs = self._prime()
        if self._interval:
            time.sleep(self._interval)
        processes = self._read(procs)
        system_usage = psutil.cpu_percent(None)

        apps: dict[str, AppUsage] = {}
        for process in processes:
            entry = apps.setdefault(normalize_app_name(process.name), AppUsage())
            entry.cpu_percent += process.cpu_usage
            entry.memory_mb += process.memory_usage
            entry.process_count += 1
        for entry in apps.values():
            entry.cpu_percent = round(entry.cpu_percent, 1)
            entry.memory_mb = round(entry.memory_mb, 1)

        busiest = sorted(processes, key=lambda p: p.cpu_usage, reverse=True)[: self._top_n]
        cpu_info = CpuInfo(
            model=cpu_model(),
            cores=psutil.cpu_count() or 1,
            usage=round(system_usage, 1),
            processes=busiest,
        )
        log.debug("resources_sampled", processes=len(processes), apps=len(apps))
        return ResourceSample(apps=apps, cpu_info=cpu_info)

    async def sample(self) -> ResourceSample:
        return await asyncio.to_thread(self._collect)


def enrich(windows: list[WindowInfo], usage: dict[str, AppUsage]) -> list[WindowInfo]:
    """Return copies of *windows* carrying their app's usage (0 when unknown)."""
    enriched = []
    for window in windows:
        app = usage.get(window.app_name) or usage.get(normalize_app_name(window.app_name))
        enriched.append(
            window.model_copy(
                update={
                    "cpu_usage": app.cpu_percent if app else 0.0,
                    "memory_usage": app.memory_mb if app else 0.0,
                }
            )
        )
    return enriched
