"""Tests for configuration helpers."""

import pytest
import yaml
from pydantic import ValidationError

from leader_address.config import LeaderAddressConfig, dump_config, load_config


def test_defaults():
    cfg = LeaderAddressConfig()
    assert cfg.leader_path == "/hbase/master"
    assert cfg.default_wait_timeout_ms == 0
    assert cfg.lock_poll_interval == pytest.approx(0.05)


def test_path_normalization():
    assert LeaderAddressConfig(base_path="/cluster/", master_node="/leader").leader_path == "/cluster/leader"
    assert LeaderAddressConfig(base_path="/", master_node="master").leader_path == "/master"


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        LeaderAddressConfig(base_path="relative")
    with pytest.raises(ValidationError):
        LeaderAddressConfig(master_node="  ")
    with pytest.raises(ValidationError):
        LeaderAddressConfig(default_wait_timeout_ms=-1)
    with pytest.raises(ValidationError):
        LeaderAddressConfig(lock_poll_interval=0)


def test_load_config_none_returns_defaults():
    cfg = load_config(None)
    assert isinstance(cfg, LeaderAddressConfig)
    assert cfg.leader_path == "/hbase/master"


def test_load_config_with_nested_key(tmp_path):
    cfg_path = tmp_path / "leader.yaml"
    cfg_path.write_text(
        yaml.safe_dump({"leader_address": {"base_path": "/prod", "default_wait_timeout_ms": 2500}})
    )
    cfg = load_config(cfg_path)
    assert cfg.leader_path == "/prod/master"
    assert cfg.default_wait_timeout_ms == 2500

    cfg_path.write_text(yaml.safe_dump({"master_node": "active-master"}))
    cfg = load_config(cfg_path)
    assert cfg.leader_path == "/hbase/active-master"


def test_load_config_empty_file(tmp_path):
    cfg_path = tmp_path / "empty.yaml"
    cfg_path.write_text("")
    assert load_config(cfg_path) == LeaderAddressConfig()


def test_dump_and_reload(tmp_path):
    cfg = LeaderAddressConfig(base_path="/staging", default_wait_timeout_ms=100)
    output = tmp_path / "out" / "leader.yaml"
    dump_config(cfg, output)

    raw = yaml.safe_load(output.read_text())
    assert raw["leader_address"]["base_path"] == "/staging"
    assert "leader_path" not in raw["leader_address"]
    assert load_config(output) == cfg
