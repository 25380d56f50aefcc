import pytest

from afroute.config import (
    AfrouteConfig,
    ConfigError,
    ConfigManager,
    ConfigValue,
    ValidationError,
    get_config,
    get_config_manager,
)
from afroute.core import DEFAULT_DATA_DIR


def test_defaults():
    cfg = get_config()
    assert cfg.data.data_dir.get() == str(DEFAULT_DATA_DIR)
    assert cfg.data.default_country.get() == "ng"
    assert cfg.data.validate_schema.get() is True
    assert cfg.data.strict_integrity.get() is True
    assert cfg.logging.log_level.get() == "warning"
    assert cfg.logging.log_format.get() == "text"


def test_manager_is_a_singleton():
    assert ConfigManager() is get_config_manager()
    ConfigManager.reset_instance()
    assert get_config().data.default_country.get() == "ng"


def test_set_and_get_by_path():
    m = get_config_manager()
    m.set("data.default_country", "ke")
    assert m.get("data.default_country") == "ke"
    assert get_config().data.default_country.get() == "ke"


def test_set_rejects_invalid_values():
    m = get_config_manager()
    with pytest.raises(ValidationError):
        m.set("logging.log_level", "verbose")
    with pytest.raises(ValidationError):
        m.set("data.default_country", "nga")
    with pytest.raises(ConfigError):
        m.set("data.nope", 1)
    with pytest.raises(ConfigError):
        m.set("data", {})


def test_environment_wins_over_runtime_value(monkeypatch):
    m = get_config_manager()
    m.set("data.default_country", "ke")
    monkeypatch.setenv("AFROUTE_COUNTRY", "gh")
    assert m.get("data.default_country") == "gh"


@pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False)])
def test_boolean_env_coercion(monkeypatch, raw, expected):
    monkeypatch.setenv("AFROUTE_STRICT_INTEGRITY", raw)
    assert get_config().data.strict_integrity.get() is expected


def test_load_from_file(tmp_path):
    p = tmp_path / "afroute.yaml"
    p.write_text(
        "data:\n  default_country: ke\n  strict_integrity: false\nlogging:\n  log_format: json\n",
        encoding="utf-8",
    )
    m = get_config_manager()
    m.load_from_file(p)
    assert m.get("data.default_country") == "ke"
    assert m.get("data.strict_integrity") is False
    assert m.get("logging.log_format") == "json"
    assert m.config_paths == [p]


def test_load_from_file_errors(tmp_path):
    m = get_config_manager()
    with pytest.raises(ConfigError, match="not found"):
        m.load_from_file(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        m.load_from_file(bad)

    unknown = tmp_path / "unknown.yaml"
    unknown.write_text("data:\n  colour: blue\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Unknown config key: data.colour"):
        m.load_from_file(unknown)

    broken = tmp_path / "broken.yaml"
    broken.write_text("data: [\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        m.load_from_file(broken)


def test_load_defaults_reads_working_directory(tmp_path, monkeypatch):
    (tmp_path / "afroute.yaml").write_text("data:\n  default_country: gh\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    m = get_config_manager()
    m.load_defaults()
    assert m.get("data.default_country") == "gh"


def test_validate_reports_bad_environment(monkeypatch):
    monkeypatch.setenv("AFROUTE_LOG_LEVEL", "loud")
    errors = get_config_manager().validate()
    assert errors == ["logging.log_level: validation failed for value 'loud'"]


def test_to_dict_and_yaml():
    cfg = AfrouteConfig()
    d = cfg.to_dict()
    assert d["data"]["default_country"] == "ng"
    assert d["logging"] == {"log_level": "warning", "log_format": "text"}
    assert "default_country: ng" in cfg.to_yaml()


def test_config_value_reset():
    v = ConfigValue(default=3, validator=lambda x: x > 0)
    v.set(5)
    assert v.get() == 5
    v.reset()
    assert v.get() == 3
