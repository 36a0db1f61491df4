"""Tests for the toolchain environment cache."""

import json

from modbuild.toolchain.environment import ToolchainEnvironment, env_spec


def test_env_spec_native():
    assert env_spec("x64", "x64") == "x64"


def test_env_spec_cross():
    assert env_spec("x64", "arm64") == "x64_arm64"


def test_cache_path(tmp_path):
    assert ToolchainEnvironment.cache_path(tmp_path, "msvsenv", "x64", "x86") == tmp_path / "msvsenv_x64_x86.json"


def test_save_and_load(tmp_path):
    path = tmp_path / "build" / "msvsenv_x64.json"
    env = ToolchainEnvironment(host="x64", target="x64", variables={"PATH": r"C:\VC\bin", "INCLUDE": r"C:\VC\include"})

    env.save(path)
    loaded = ToolchainEnvironment.load(path)

    assert loaded == env
    assert loaded.spec == "x64"
    assert not path.with_suffix(".tmp").exists()


def test_saved_file_is_json(tmp_path):
    path = tmp_path / "gccenv_x64.json"
    ToolchainEnvironment(host="x64", target="x64", variables={"CXX": "/usr/bin/g++"}).save(path)

    data = json.loads(path.read_text(encoding="utf-8"))

    assert data == {"host": "x64", "target": "x64", "variables": {"CXX": "/usr/bin/g++"}}


def test_load_missing_returns_none(tmp_path):
    assert ToolchainEnvironment.load(tmp_path / "missing.json") is None


def test_load_corrupted_returns_none(tmp_path):
    path = tmp_path / "msvsenv_x64.json"
    path.write_text("{not json", encoding="utf-8")

    assert ToolchainEnvironment.load(path) is None


def test_load_wrong_shape_returns_none(tmp_path):
    path = tmp_path / "msvsenv_x64.json"
    path.write_text(json.dumps({"host": "x64", "target": "x64", "variables": ["PATH"]}), encoding="utf-8")

    assert ToolchainEnvironment.load(path) is None


def test_load_missing_key_returns_none(tmp_path):
    path = tmp_path / "msvsenv_x64.json"
    path.write_text(json.dumps({"host": "x64"}), encoding="utf-8")

    assert ToolchainEnvironment.load(path) is None
