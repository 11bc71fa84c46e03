"""Prometheus text exposition (format 0.0.4) for ``SystemMetrics``."""

from __future__ import annotations

from nodegate.models.metrics import SystemMetrics

CONTENT_TYPE = "text/plain; version=0.0.4"

# (name, help, type, attribute, is_percentage)
METRICS = [
    ("system_cpu_usage_percent", "CPU usage percentage", "gauge", "cpu_percent", True),
    ("system_memory_used_bytes", "Memory used in bytes", "gauge", "memory_used", False),
    ("system_memory_total_bytes", "Total memory in bytes", "gauge", "memory_total", False),
    ("system_memory_usage_percent", "Memory usage percentage", "gauge", "memory_percent", True),
    ("system_disk_used_bytes", "Disk used in bytes", "gauge", "disk_used", False),
    ("system_disk_total_bytes", "Total disk space in bytes", "gauge", "disk_total", False),
    ("system_disk_usage_percent", "Disk usage percentage", "gauge", "disk_percent", True),
    ("system_network_bytes_sent", "Network bytes sent", "counter", "network_bytes_sent", False),
    ("system_network_bytes_recv", "Network bytes received", "counter", "network_bytes_recv", False),
    ("system_uptime_seconds", "System uptime in seconds", "counter", "uptime_seconds", False),
]


def render_metrics(metrics: SystemMetrics) -> str:
    blocks: list[str] = []
    for name, help_text, metric_type, attr, is_percentage in METRICS:
        value = getattr(metrics, attr)
        formatted = f"{value:.2f}" if is_percentage else f"{int(value)}"
        blocks.append(
            f"# HELP {name} {help_text}\n"
            f"# TYPE {name} {metric_type}\n"
            f"{name} {formatted}\n"
        )
    return "\n".join(blocks)
