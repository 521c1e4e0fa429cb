import pytest

from ccb_proxy.utils.config_loader import (
    ConfigError,
    load_app_config,
    parse_duration,
    parse_form_ids,
)


@pytest.mark.parametrize(
    "value, seconds",
    [("5s", 5.0), ("500ms", 0.5), ("1m", 60.0), ("2.5", 2.5), (3, 3.0), ("100ms", 0.1)],
)
def test_parse_duration(value, seconds):
    assert parse_duration(value) == pytest.approx(seconds)


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("soon")


def test_parse_form_ids():
    assert parse_form_ids("connect_card_jdd=85, growth_track_sign_up_jdd=3,") == {
        "connect_card_jdd": 85,
        "growth_track_sign_up_jdd": 3,
    }


@pytest.mark.parametrize("raw", ["connect_card", "connect_card=abc", "=85"])
def test_parse_form_ids_rejects_bad_entries(raw):
    with pytest.raises(ValueError):
        parse_form_ids(raw)


def test_load_defaults():
    config = load_app_config({"CCB_API_URL": "https://church.ccbchurch.com/"})

    assert config.ccb.api_url == "https://church.ccbchurch.com"
    assert config.ccb.default_timeout == 5.0
    assert config.retry.initial_interval == pytest.approx(0.1)
    assert config.retry.multiplier == 2.0
    assert config.retry.max_elapsed_time == 15.0
    assert config.api.form_ids == {"connect_card_jdd": 85}
    assert config.integrations_mode == "real"


def test_load_full_environment():
    config = load_app_config(
        {
            "CCB_API_URL": "https://church.ccbchurch.com",
            "CCB_USERNAME": "ccb",
            "CCB_PASSWORD": "pw",
            "CCB_DEFAULT_TIMEOUT": "750ms",
            "CCB_RETRY_MAX_ELAPSED": "30s",
            "API_USERNAME": "admin",
            "API_PASSWORD": "s3cret",
            "CCB_FORM_IDS": "connect_card_itech=12,connect_card_jdd=85",
            "LOG_LEVEL": "debug",
        }
    )

    assert config.ccb.username == "ccb"
    assert config.ccb.default_timeout == pytest.approx(0.75)
    assert config.retry.max_elapsed_time == 30.0
    assert config.api.form_ids == {"connect_card_itech": 12, "connect_card_jdd": 85}
    assert config.api.log_level == "DEBUG"


def test_real_mode_requires_api_url():
    with pytest.raises(ConfigError):
        load_app_config({})


def test_mock_mode_does_not_need_api_url():
    assert load_app_config({"INTEGRATIONS_MODE": "mock"}).integrations_mode == "mock"


@pytest.mark.parametrize(
    "env",
    [
        {"CCB_DEFAULT_TIMEOUT": "-1s"},
        {"CCB_DEFAULT_TIMEOUT": "whenever"},
        {"CCB_FORM_IDS": "broken"},
        {"INTEGRATIONS_MODE": "staging"},
    ],
)
def test_invalid_values_raise_config_error(env):
    with pytest.raises(ConfigError):
        load_app_config({"CCB_API_URL": "https://church.ccbchurch.com", **env})
