import pytest

from icapeg.config import ConfigError, ServiceInfo, load_config, parse_config, validate_extensions

VALID = """
[app]
port = 1344
log_level = "debug"
write_logs_to_console = true
debugging_headers = false
services = ["echo"]

[echo]
vendor = "echo"
service_caption = "echo service"
service_tag = "ECHO ICAP"
req_mode = true
resp_mode = false
shadow_service = true
preview_enabled = true
preview_bytes = 1024
max_filesize = 0
bypass_extensions = []
process_extensions = ["pdf", "zip"]
reject_extensions = ["*"]
"""


def _service(extra: str) -> str:
    return (
        '[app]\nservices = ["echo"]\n\n[echo]\nreq_mode = true\n'
        'process_extensions = ["*"]\n' + extra
    )


def test_parse_valid_config():
    config = parse_config(VALID)
    assert config.port == 1344
    assert config.log_level == "debug"
    assert config.write_logs_to_console is True
    assert config.debugging_headers is False
    assert config.services == ["echo"]
    assert config.services_instances["echo"] == ServiceInfo(
        vendor="echo",
        service_caption="echo service",
        service_tag="ECHO ICAP",
        req_mode=True,
        resp_mode=False,
        shadow_service=True,
        preview_enabled=True,
        preview_bytes="1024",
    )


def test_load_config_matches_parse(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(VALID)
    assert load_config(path) == parse_config(VALID)


def test_parse_accepts_mapping():
    data = {"app": {"services": ["echo"]}, "echo": {"resp_mode": True, "process_extensions": ["*"]}}
    config = parse_config(data)
    assert config.services_instances["echo"].resp_mode is True
    assert config.services_instances["echo"].req_mode is False


def test_missing_service_section():
    with pytest.raises(ConfigError, match="echo section doesn't exist"):
        parse_config('[app]\nservices = ["echo"]\n')


def test_both_modes_disabled():
    text = '[app]\nservices = ["echo"]\n[echo]\nprocess_extensions = ["*"]\n'
    with pytest.raises(ConfigError, match="Request mode and response mode are disabled together in echo service"):
        parse_config(text)


def test_negative_max_filesize():
    with pytest.raises(ConfigError, match="max_filesize value in config.toml file is not valid"):
        parse_config(_service("max_filesize = -1\n"))


def test_invalid_toml():
    with pytest.raises(ConfigError):
        parse_config("[app\nport = ")


def test_extension_conflict_reported_from_config():
    with pytest.raises(ConfigError, match="is stored in multiple arrays"):
        parse_config(_service('reject_extensions = ["*"]\n'))


def test_asterisk_with_other_extensions():
    with pytest.raises(ConfigError, match="bypass_extensions array has one asterisk"):
        validate_extensions("echo", ["*", "pdf"], [], [])


def test_duplicate_in_bypass_message():
    with pytest.raises(ConfigError, match=r"was stored in multiple arrays \(bypass_extensions or reject_extensions\)"):
        validate_extensions("echo", ["pdf", "pdf"], ["*"], [])


def test_duplicate_across_arrays():
    with pytest.raises(ConfigError, match='This extension "zip" is stored in multiple arrays'):
        validate_extensions("echo", ["zip"], ["*"], ["zip"])


def test_no_asterisk():
    with pytest.raises(ConfigError, match='There is no "\\*" stored in any extension arrays'):
        validate_extensions("echo", ["pdf"], ["zip"], ["exe"])


def test_no_app_section_gives_empty_config():
    config = parse_config("")
    assert config.services == []
    assert config.services_instances == {}
    assert config.port == 0