import pytest

import sjobs_config


@pytest.mark.parametrize("value", ["1", "true", " YES ", "on"])
def test_truthy_values(value):
    assert sjobs_config._is_truthy(value)


@pytest.mark.parametrize("value", [None, "", "0", "off", "nope"])
def test_falsy_values(value):
    assert not sjobs_config._is_truthy(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 2.0),
        ("5", 5.0),
        ("0.5", 0.5),
        ("soon", 2.0),
        ("0", 2.0),
        ("-3", 2.0),
        ("nan", 2.0),
    ],
)
def test_refresh_rate(value, expected):
    assert sjobs_config._refresh_rate(value) == expected


def test_fake_cluster_name(monkeypatch):
    monkeypatch.setattr(sjobs_config, "USE_FAKE_DATA", True)
    assert sjobs_config.get_cluster_name() == "DEMO-CLUSTER"
