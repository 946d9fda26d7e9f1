from main import ExternalBookResolver, MockBookResolver, Settings, build_resolver


def test_defaults_select_mock_mode(monkeypatch):
    for name in ("ENABLE_EXTERNAL_BOOK_SERVICE", "EXTERNAL_BOOK_ISBN", "DO_NOT_ENCRYPT", "GOOGLE_API_KEY"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.enable_external_book_service is False
    assert settings.external_book_isbn == "0486424618"
    assert settings.do_not_encrypt is False
    assert settings.google_api_key is None
    assert isinstance(build_resolver(settings), MockBookResolver)


def test_only_exact_true_enables_external_mode(monkeypatch):
    for value, expected in [("true", True), ("True", False), ("1", False), ("yes", False), ("", False)]:
        monkeypatch.setenv("ENABLE_EXTERNAL_BOOK_SERVICE", value)
        assert Settings.from_env().enable_external_book_service is expected


def test_external_mode_builds_external_resolver(monkeypatch):
    monkeypatch.setenv("ENABLE_EXTERNAL_BOOK_SERVICE", "true")
    monkeypatch.setenv("EXTERNAL_SERVICE_TIMEOUT", "2.5")
    monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")

    settings = Settings.from_env()

    assert settings.external_service_timeout == 2.5
    assert settings.rate_limit_enabled is False
    assert isinstance(build_resolver(settings), ExternalBookResolver)
