import pytest
from omegaconf import OmegaConf

from caseta_codec.caseta.types import ConfigurationError
from caseta_codec.core.config import BridgeSettings, CasetaConfig, load_config

@pytest.fixture
def simple_config():
    return OmegaConf.create({
        'caseta': {
            'host': '192.168.1.20',
            'port': 23,
            'username': 'lutron',
            'password': 'integration',
        },
        'nested': {
            'key1': 'value1',
        },
    })

@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        "caseta:\n"
        "  host: bridge.local\n"
        "  username: lutron\n"
        "  password: integration\n"
        "  idle_timeout: 300\n"
        "  strict: false\n"
    )
    return str(path)

def test_get_nested_key(simple_config):
    cfg = CasetaConfig(simple_config)
    assert cfg.get('caseta.host') == '192.168.1.20'
    assert cfg.get('nested.key1') == 'value1'

def test_missing_key_with_default(simple_config):
    cfg = CasetaConfig(simple_config)
    assert cfg.get('does_not_exist') is None
    assert cfg.get('nested.nope', 999) == 999

def test_getattr_access(simple_config):
    cfg = CasetaConfig(simple_config)
    assert cfg.caseta.port == 23

def test_set_nested_key(simple_config):
    cfg = CasetaConfig(simple_config)
    cfg.set('caseta.host', '10.0.0.5')
    cfg.set('newparent.child', 123)
    assert cfg.get('caseta.host') == '10.0.0.5'
    assert cfg.get('newparent.child') == 123

def test_load_config_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "missing.yml"), environ={})
    assert cfg.get('caseta.port') == 23
    assert cfg.get('caseta.connect_timeout') == 10.0
    assert cfg.get('caseta.host') is None

def test_load_config_from_file(config_file):
    settings = BridgeSettings.from_config(load_config(config_file, environ={}))
    assert settings == BridgeSettings(
        host='bridge.local',
        port=23,
        username='lutron',
        password='integration',
        idle_timeout=300.0,
        strict=False,
    )

def test_environment_overrides_file(config_file):
    environ = {'CASETA_HOST': '10.1.1.1', 'CASETA_PORT': '2323', 'CASETA_PASSWORD': 'secret'}
    settings = BridgeSettings.from_config(load_config(config_file, environ=environ))
    assert settings.host == '10.1.1.1'
    assert settings.port == 2323
    assert settings.username == 'lutron'
    assert settings.password == 'secret'

def test_environment_only(tmp_path):
    environ = {
        'CASETA_HOST': 'bridge',
        'CASETA_PORT': '23',
        'CASETA_USERNAME': 'lutron',
        'CASETA_PASSWORD': 'integration',
    }
    settings = BridgeSettings.from_config(load_config(str(tmp_path / "none.yml"), environ=environ))
    assert settings.host == 'bridge'
    assert settings.login_timeout == 10.0
    assert settings.idle_timeout is None
    assert settings.strict is True

def test_missing_required_settings(tmp_path):
    cfg = load_config(str(tmp_path / "none.yml"), environ={'CASETA_HOST': 'bridge'})
    with pytest.raises(ConfigurationError, match="caseta.username, caseta.password"):
        BridgeSettings.from_config(cfg)

@pytest.mark.parametrize("port", ["telnet", "0", "70000"])
def test_invalid_port(simple_config, port):
    cfg = CasetaConfig(simple_config)
    cfg.set('caseta.port', port)
    with pytest.raises(ConfigurationError, match="not a valid port"):
        BridgeSettings.from_config(cfg)

def test_invalid_timeout(simple_config):
    cfg = CasetaConfig(simple_config)
    cfg.set('caseta.idle_timeout', -1)
    with pytest.raises(ConfigurationError, match="caseta.idle_timeout"):
        BridgeSettings.from_config(cfg)

def test_connect_timeout_is_required(simple_config):
    cfg = CasetaConfig(simple_config)
    cfg.set('caseta.connect_timeout', None)
    with pytest.raises(ConfigurationError, match="caseta.connect_timeout"):
        BridgeSettings.from_config(cfg)

def test_null_connect_timeout_in_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        "caseta:\n"
        "  host: bridge.local\n"
        "  username: lutron\n"
        "  password: integration\n"
        "  connect_timeout: null\n"
    )
    with pytest.raises(ConfigurationError, match="a timeout is required"):
        BridgeSettings.from_config(load_config(str(path), environ={}))

@pytest.mark.parametrize("value", ["false", "true", 0, 1])
def test_strict_must_be_boolean(simple_config, value):
    cfg = CasetaConfig(simple_config)
    cfg.set('caseta.strict', value)
    with pytest.raises(ConfigurationError, match="caseta.strict"):
        BridgeSettings.from_config(cfg)

def test_strict_false_from_yaml(config_file):
    settings = BridgeSettings.from_config(load_config(config_file, environ={}))
    assert settings.strict is False
