"""
disk_agent.config
AUTHOR: carter-vin

Runtime configuration

Precedence:
1) environment overrides (DISK_AGENT_*)
2) CLI option values
3) defaults below

Env overrides matter for:
- forcing stable node ids in demos / multi-node simulation on one laptop
- turning on trace logging without touching service units
"""

from __future__ import annotations

import os
import socket
from dataclasses import dataclass
from typing import Mapping, Optional

from disk_agent.logging import validate_level

NODE_ID_ENV = "DISK_AGENT_NODE_ID"
LOG_LEVEL_ENV = "DISK_AGENT_LOG_LEVEL"
TIMEOUT_ENV = "DISK_AGENT_TIMEOUT"

DEFAULT_INTERVAL_S = 60
DEFAULT_LOG_LEVEL = "info"


@dataclass(frozen=True)
class AgentConfig:
    """
    interval_s: seconds between discovery/sample cycles (run mode)
    timeout_s: per OS query; None waits forever
    log_level: trace | info | warn
    node_id: report identity (default hostname)
    emit_stdout: print report JSON each cycle
    """

    interval_s: int = DEFAULT_INTERVAL_S
    timeout_s: Optional[float] = None
    log_level: str = DEFAULT_LOG_LEVEL
    node_id: str = ""
    emit_stdout: bool = True


def _parse_timeout(raw: str) -> Optional[float]:
    raw = raw.strip()
    if not raw or raw.lower() == "none":
        return None
    value = float(raw)
    if value <= 0:
        raise ValueError(f"timeout must be > 0: {raw}")
    return value


def load_config(
    *,
    interval_s: int = DEFAULT_INTERVAL_S,
    timeout_s: Optional[float] = None,
    log_level: str = DEFAULT_LOG_LEVEL,
    node_id: Optional[str] = None,
    emit_stdout: bool = True,
    env: Optional[Mapping[str, str]] = None,
) -> AgentConfig:
    """
    Build AgentConfig from option values + environment

    Raises ValueError on invalid values (caller exits non-zero)
    """
    if env is None:
        env = os.environ

    if interval_s < 1:
        raise ValueError(f"interval must be >= 1: {interval_s}")

    if timeout_s is not None and timeout_s <= 0:
        raise ValueError(f"timeout must be > 0: {timeout_s}")

    if env.get(TIMEOUT_ENV):
        timeout_s = _parse_timeout(env[TIMEOUT_ENV])

    log_level = validate_level(env.get(LOG_LEVEL_ENV) or log_level)

    # Node_id selection: override first, then option, then hostname
    resolved_node = env.get(NODE_ID_ENV) or node_id or socket.gethostname()

    return AgentConfig(
        interval_s=interval_s,
        timeout_s=timeout_s,
        log_level=log_level,
        node_id=resolved_node,
        emit_stdout=emit_stdout,
    )
