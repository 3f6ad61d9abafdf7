import dataclasses
from pathlib import Path

import pytest

from host_bench.core.config import RunConfiguration, load_config, load_config_file
from host_bench.errors import ConfigError


def test_defaults():
    config = load_config({})
    assert config.file_size == "2G"
    assert config.duration == 30
    assert config.cpu_prime == 20000
    assert config.mem_total == "1G"
    assert config.fio_timeout == 900
    assert config.net_timeout == 120
    assert config.require_root is True
    assert Path(config.test_dir).name == "bench"
    assert config.test_file == str(Path(config.test_dir) / "fio_testfile.dat")


def test_environment_overrides():
    config = load_config({
        "TESTDIR": "/mnt/scratch",
        "FILESIZE": "4G",
        "DURATION": "10",
        "CPU_PRIME": "5000",
        "MEM_TOTAL": "512M",
        "FIO_TIMEOUT": "60",
        "NET_TIMEOUT": "30",
        "REQUIRE_ROOT": "0",
    })
    assert config == RunConfiguration(
        test_dir="/mnt/scratch", file_size="4G", duration=10, cpu_prime=5000,
        mem_total="512M", fio_timeout=60, net_timeout=30, require_root=False,
    )


def test_empty_variables_fall_back_to_defaults():
    assert load_config({"DURATION": "", "FILESIZE": ""}) == load_config({})


def test_configuration_is_immutable():
    config = load_config({})
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.duration = 5


@pytest.mark.parametrize("env, field, message", [
    ({"DURATION": "abc"}, "duration", "DURATION must be an integer"),
    ({"CPU_PRIME": "0"}, "cpu_prime", "CPU_PRIME must be >= 1"),
    ({"FIO_TIMEOUT": "-5"}, "fio_timeout", "FIO_TIMEOUT must be >= 1"),
    ({"MEM_TOTAL": "a lot"}, "mem_total", "MEM_TOTAL must be an IEC size"),
    ({"REQUIRE_ROOT": "maybe"}, "require_root", "REQUIRE_ROOT must be a boolean"),
])
def test_invalid_values_fall_back_to_defaults(env, field, message, caplog):
    config = load_config(env)

    assert getattr(config, field) == getattr(RunConfiguration(), field)
    assert message in caplog.text


def test_one_bad_value_keeps_the_others():
    config = load_config({"DURATION": "forever", "CPU_PRIME": "500"})
    assert config.duration == 30
    assert config.cpu_prime == 500


def test_unparseable_file_size_is_kept():
    assert load_config({"FILESIZE": "huge"}).file_size == "huge"


def test_yaml_file_with_env_precedence(tmp_path):
    config_file = tmp_path / "bench.yaml"
    config_file.write_text("file_size: 8G\nduration: 5\nrequire_root: false\n")

    config = load_config({"BENCH_CONFIG": str(config_file), "DURATION": "7"})
    assert config.file_size == "8G"
    assert config.duration == 7
    assert config.require_root is False


def test_yaml_file_errors(tmp_path):
    with pytest.raises(ConfigError, match="Could not read"):
        load_config_file(str(tmp_path / "missing.yaml"))

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config_file(str(bad))

    unknown = tmp_path / "unknown.yaml"
    unknown.write_text("gpu: yes\n")
    with pytest.raises(ConfigError, match="gpu"):
        load_config_file(str(unknown))

    broken = tmp_path / "broken.yaml"
    broken.write_text("file_size: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config_file(str(broken))


def test_unusable_yaml_file_is_ignored(tmp_path, caplog):
    broken = tmp_path / "broken.yaml"
    broken.write_text("file_size: [unclosed\n")

    config = load_config({"BENCH_CONFIG": str(broken), "DURATION": "7"})

    assert config == RunConfiguration(duration=7)
    assert "ignoring config file" in caplog.text


def test_bad_value_in_yaml_file_falls_back(tmp_path, caplog):
    config_file = tmp_path / "bench.yaml"
    config_file.write_text("duration: soon\nfile_size: 8G\n")

    config = load_config({"BENCH_CONFIG": str(config_file)})

    assert config.duration == 30
    assert config.file_size == "8G"
    assert "DURATION must be an integer" in caplog.text
