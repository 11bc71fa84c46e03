from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- app ---
    app_name: str = "nodegate"
    debug: bool = False
    log_level: str = "info"

    # --- server ---
    host: str = "0.0.0.0"
    port: int = 8085

    # --- access gate ---
    overlay_ipv4_network: str = "100.64.0.0/10"
    overlay_ipv6_network: str = "fd7a:115c:a1e0::/48"
    peer_roster_command: list[str] = ["tailscale", "ip"]  # empty disables the roster

    # --- platform ---
    command_timeout: float = 5.0  # seconds per external command
    disk_path: str = "/"

    # --- shutdown ---
    shutdown_delay: float = 0.1  # lets the HTTP response flush first
    graceful_shutdown_minutes: int = 1

    model_config = {"env_file": ".env", "env_prefix": "NODEGATE_"}


settings = Settings()
