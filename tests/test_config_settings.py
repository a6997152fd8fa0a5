from aa_backend.config import Settings


def test_defaults_without_environment(monkeypatch):
    """Server and polling defaults apply when nothing is set."""

    for name in ("PORT", "CHAIN_ID", "BUNDLER_URL", "RECEIPT_POLL_MAX_ATTEMPTS", "RECEIPT_POLL_INTERVAL_MS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.port == 3001
    assert settings.chain_id is None
    assert settings.receipt_poll_max_attempts == 10
    assert settings.receipt_poll_interval_seconds == 3.0
    assert settings.upstream_timeout_seconds == 30.0
    assert settings.is_bundler_configured is False


def test_environment_values_are_parsed(monkeypatch):
    monkeypatch.setenv("BUNDLER_URL", "https://bundler.example.com")
    monkeypatch.setenv("ENTRY_POINT_ADDRESS", "0x0000000071727De22E5E9d8BAf0edAc6f37da032")
    monkeypatch.setenv("CHAIN_ID", "1946")
    monkeypatch.setenv("RECEIPT_POLL_INTERVAL_MS", "500")

    settings = Settings(_env_file=None)

    assert settings.chain_id == 1946
    assert settings.receipt_poll_interval_seconds == 0.5
    assert settings.is_bundler_configured is True


def test_blank_chain_id_is_unset(monkeypatch):
    """An empty CHAIN_ID means not configured rather than a parse error."""

    monkeypatch.setenv("CHAIN_ID", "  ")

    settings = Settings(_env_file=None)

    assert settings.chain_id is None


def test_paymaster_needs_url_and_id(monkeypatch):
    monkeypatch.setenv("PAYMASTER_SERVICE_URL", "https://paymaster.example.com")
    monkeypatch.delenv("PAYMASTER_ID", raising=False)

    assert Settings(_env_file=None).is_paymaster_configured is False
    assert Settings(_env_file=None, paymaster_id="pm_1").is_paymaster_configured is True


def test_cors_origins_split_and_trimmed():
    settings = Settings(_env_file=None, allowed_origins="http://a.test, http://b.test ,,")

    assert settings.cors_origins == ["http://a.test", "http://b.test"]
