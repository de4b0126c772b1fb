from pathlib import Path

import pytest

from docserve.config import ServerConfig, split_address
from docserve.domain.errors import ConfigError


@pytest.mark.parametrize(
    "address, expected",
    [
        ("localhost:9090", ("localhost", 9090)),
        ("127.0.0.1:0", ("127.0.0.1", 0)),
        (":8080", ("", 8080)),
        ("localhost:", ("localhost", 0)),
        ("[::1]:8000", ("::1", 8000)),
    ],
)
def test_split_address(address, expected):
    assert split_address(address) == expected


@pytest.mark.parametrize("address", ["localhost", "localhost:http", "localhost:70000", "::1:80", "localhost:\u00b2", "localhost:\u0663"])
def test_split_address_rejects_invalid(address):
    with pytest.raises(ConfigError):
        split_address(address)


def test_defaults():
    cfg = ServerConfig.from_args([])
    assert cfg.bind_address == "localhost:9090"
    assert cfg.root_directory == Path(".")
    assert cfg.spa_fallback is False


def test_go_style_flags():
    cfg = ServerConfig.from_args(["-addr", "localhost:0", "-dir", "./fixtures", "-spa"])
    assert cfg.bind_address == "localhost:0"
    assert cfg.root_directory == Path("./fixtures")
    assert cfg.spa_fallback is True


def test_double_dash_flags():
    cfg = ServerConfig.from_args(["--addr", ":0", "--dir", "/tmp"])
    assert cfg.bind_address == ":0"
    assert cfg.root_directory == Path("/tmp")


def test_config_is_immutable():
    cfg = ServerConfig()
    with pytest.raises(Exception):
        cfg.bind_address = "x:1"


def test_invalid_address_exits_with_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        ServerConfig.from_args(["-addr", "nohost"])
    assert exc.value.code == 2
    assert "missing port" in capsys.readouterr().err


def test_non_ascii_digit_port_is_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        ServerConfig.from_args(["-addr", "localhost:²"])
    assert exc.value.code == 2
    assert "invalid port" in capsys.readouterr().err
