from field_service import config


def test_env_float(monkeypatch):
    monkeypatch.setenv('FIELD_SERVICE_TEST_RATE', '0,1')
    assert config._env_float('FIELD_SERVICE_TEST_RATE', 0.07) == 0.1

    monkeypatch.setenv('FIELD_SERVICE_TEST_RATE', '  ')
    assert config._env_float('FIELD_SERVICE_TEST_RATE', 0.07) == 0.07


def test_env_float_invalid_value_is_logged(monkeypatch, caplog):
    monkeypatch.setenv('FIELD_SERVICE_TEST_RATE', 'sete')
    with caplog.at_level('WARNING', logger='field_service.config'):
        assert config._env_float('FIELD_SERVICE_TEST_RATE', 0.07) == 0.07
    assert "FIELD_SERVICE_TEST_RATE='sete' no es numérico" in caplog.text


def test_env_bool(monkeypatch):
    monkeypatch.setenv('FIELD_SERVICE_TEST_FLAG', 'Yes')
    assert config._env_bool('FIELD_SERVICE_TEST_FLAG', False) is True
    monkeypatch.setenv('FIELD_SERVICE_TEST_FLAG', '0')
    assert config._env_bool('FIELD_SERVICE_TEST_FLAG', True) is False
    monkeypatch.delenv('FIELD_SERVICE_TEST_FLAG')
    assert config._env_bool('FIELD_SERVICE_TEST_FLAG', True) is True
