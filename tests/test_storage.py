import os

import pytest

import storage


def test_data_path_follows_env(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("LINKBOARD_HOME", str(tmp_path / "elsewhere"))
    path = storage.get_data_path()
    assert path == str(tmp_path / "elsewhere")
    assert os.path.isdir(path)
    assert storage.wallet_path().startswith(path)


def test_data_path_defaults_to_documents(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("LINKBOARD_HOME", raising=False)
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    assert storage.get_data_path() == os.path.join(str(tmp_path), "Documents", "LinkBoard")


def test_load_json(tmp_path) -> None:
    path = str(tmp_path / "x.json")
    assert storage.load_json(path) is None

    storage.save_json(path, {"a": 1})
    assert storage.load_json(path) == {"a": 1}
    assert not os.path.exists(path + ".tmp")

    with open(path, "w", encoding="utf-8") as f:
        f.write("[1, 2]")
    with pytest.raises(ValueError):
        storage.load_json(path)


@pytest.mark.parametrize(
    "raw, expected",
    [("", 0.4), ("0", 0.0), ("250", 0.25), ("-5", 0.0), ("fast", 0.4)],
)
def test_simulated_latency(monkeypatch, raw, expected) -> None:
    monkeypatch.setenv("LINKBOARD_LATENCY_MS", raw)
    assert storage.simulated_latency() == pytest.approx(expected)


def test_failure_rate_is_clamped(monkeypatch) -> None:
    monkeypatch.setenv("LINKBOARD_FAIL_RATE", "3")
    assert storage.simulated_failure_rate() == 1.0
    monkeypatch.setenv("LINKBOARD_FAIL_RATE", "-1")
    assert storage.simulated_failure_rate() == 0.0
