"""
Contract tests for configuration precedence and validation.
"""

import pytest

from disk_agent.config import load_config


def test_defaults_fall_back_to_hostname(monkeypatch) -> None:
    monkeypatch.setattr("disk_agent.config.socket.gethostname", lambda: "host-a")

    config = load_config(env={})

    assert config.node_id == "host-a"
    assert config.timeout_s is None
    assert config.log_level == "info"
    assert config.emit_stdout is True


def test_env_overrides_options() -> None:
    config = load_config(
        node_id="from-option",
        log_level="warn",
        timeout_s=3.0,
        env={
            "DISK_AGENT_NODE_ID": "from-env",
            "DISK_AGENT_LOG_LEVEL": "TRACE",
            "DISK_AGENT_TIMEOUT": "1.5",
        },
    )

    assert config.node_id == "from-env"
    assert config.log_level == "trace"
    assert config.timeout_s == 1.5


def test_option_node_id_used_without_env() -> None:
    assert load_config(node_id="n1", env={}).node_id == "n1"


def test_timeout_env_none_disables_timeout() -> None:
    assert load_config(timeout_s=2.0, env={"DISK_AGENT_TIMEOUT": "none"}).timeout_s is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"interval_s": 0},
        {"timeout_s": -1.0},
        {"log_level": "debug"},
        {"env": {"DISK_AGENT_TIMEOUT": "0"}},
        {"env": {"DISK_AGENT_TIMEOUT": "soon"}},
    ],
)
def test_invalid_values_raise(kwargs) -> None:
    kwargs.setdefault("env", {})
    with pytest.raises(ValueError):
        load_config(**kwargs)
