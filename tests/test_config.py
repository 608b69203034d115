import pytest

from fireworq import config


def test_get_set(monkeypatch):
    monkeypatch.delenv("FIREWORQ_TEST1", raising=False)
    assert config.get("test1") == ""

    config.set_value("test1", "foo")
    assert config.get("test1") == "foo"

    config.set_value("test1", "bar")
    assert config.get("test1") == "bar"

    monkeypatch.setenv("FIREWORQ_TEST_FALLBACK_1", "env-value1")
    assert config.get("test_fallback_1") == "env-value1"

    monkeypatch.delenv("FIREWORQ_TEST_FALLBACK_2", raising=False)
    config.set_default("test_fallback_2", "default-value2")
    assert config.get("test_fallback_2") == "default-value2"

    monkeypatch.setenv("FIREWORQ_TEST_FALLBACK_3", "env-value3")
    config.set_default("test_fallback_3", "default-value3")
    assert config.get("test_fallback_3") == "env-value3"


def test_get_set_default(monkeypatch):
    assert config.get_default("default1") == ""

    config.set_default("default1", "bar")
    assert config.get_default("default1") == "bar"

    config.set_default("default1", "foo")
    assert config.get_default("default1") == "foo"

    monkeypatch.setenv("FIREWORQ_TEST_NO_FALLBACK_1", "env-value1")
    assert config.get_default("test_no_fallback_1") == ""


def test_locally():
    original = config.get("test_locally")

    with config.locally("test_locally", "some value"):
        assert config.get("test_locally") == "some value"
    assert config.get("test_locally") == original

    config.set_value("test_locally", "another value")

    with config.locally("test_locally", "some value"):
        assert config.get("test_locally") == "some value"
    assert config.get("test_locally") == "another value"


def test_locally_restores_after_exception():
    config.set_value("test_locally_exc", "kept")
    with pytest.raises(RuntimeError):
        with config.locally("test_locally_exc", "temporary"):
            raise RuntimeError("boom")
    assert config.get("test_locally_exc") == "kept"


def test_keys():
    found = config.keys()
    assert len(found) > 0
    assert "bind" in found
    assert "dispatch_keep_alive" in found


def test_builtin_defaults():
    assert config.get_default("bind") == "127.0.0.1:8080"
    assert config.get_default("driver") == "mysql"
    assert config.get_default("dispatch_max_conns_per_host") == "10"
    assert config.get_default("dispatch_keep_alive") == ""


def test_set_default_registers_new_key():
    config.set_default("test_new_key_registered", "x")
    assert "test_new_key_registered" in config.keys()