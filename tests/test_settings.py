from kwildb_query import ConnectorConfig, ConnectorSettings, load_settings


def test_defaults(monkeypatch):
    for name in ("KWILDB_HOST", "KWILDB_PROTOCOL", "KWILDB_SYNC"):
        monkeypatch.delenv(name, raising=False)
    settings = ConnectorSettings(_env_file=None)
    assert settings.host == "test-db.kwil.xyz"
    assert settings.protocol == "https"
    assert settings.sync is False


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("KWILDB_HOST", "db.internal")
    monkeypatch.setenv("KWILDB_SYNC", "true")
    monkeypatch.setenv("KWILDB_SECRET_KEY", "shh")
    settings = load_settings(_env_file=None)
    assert settings.host == "db.internal"
    assert settings.sync is True
    assert settings.secret_key.get_secret_value() == "shh"


def test_blank_values_fall_back():
    settings = ConnectorSettings(host="", protocol="", _env_file=None).connector_config()
    assert settings.host == "test-db.kwil.xyz"
    assert settings.protocol == "https"


def test_config_does_not_read_environment(monkeypatch):
    monkeypatch.setenv("KWILDB_HOST", "db.internal")
    config = ConnectorConfig(moat="m")
    assert config.host == "test-db.kwil.xyz"
