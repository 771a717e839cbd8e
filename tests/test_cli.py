import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from unittest.mock import patch, mock_open

import yaml

from amcfg.cli import main


def test_build_command(capsys):
    exit_code = main(["build", "dns+http://example.com/api", "--timeout", "5s"])
    assert exit_code == 0

    output = yaml.safe_load(capsys.readouterr().out)
    entry = output["alertmanagers"][0]
    assert entry["scheme"] == "http"
    assert entry["static_configs"] == ["dns+example.com:9093"]
    assert entry["path_prefix"] == "/api"
    assert entry["timeout"] == "5s"


def test_build_command_default_timeout(capsys):
    assert main(["build", "http://am:9093"]) == 0
    output = yaml.safe_load(capsys.readouterr().out)
    assert output["alertmanagers"][0]["timeout"] == "10s"


def test_build_command_invalid_address(capsys):
    assert main(["build", "://bad"]) == 1
    assert capsys.readouterr().out == ""


def test_build_command_invalid_timeout():
    assert main(["build", "http://am:9093", "--timeout", "soon"]) == 1


def test_render_command(capsys):
    with patch("builtins.open", mock_open(read_data="alertmanagers:\n- {}\n")):
        exit_code = main(["render", "alerting.yaml"])
    assert exit_code == 0

    output = yaml.safe_load(capsys.readouterr().out)
    assert output["alertmanagers"] == [
        {
            "http_config": {},
            "scheme": "http",
            "path_prefix": "",
            "static_configs": [],
            "file_sd_configs": [],
            "timeout": "10s",
        }
    ]


def test_render_command_parse_error(capsys):
    with patch("builtins.open", mock_open(read_data="alertmanagers:\n- bogus: 1\n")):
        exit_code = main(["render", "alerting.yaml"])
    assert exit_code == 1
    assert capsys.readouterr().out == ""


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_render_command_directory(tmp_path, capsys):
    assert main(["render", str(tmp_path)]) == 1
    assert capsys.readouterr().out == ""


def test_render_command_invalid_utf8(tmp_path, capsys):
    config_file = tmp_path / "alerting.yaml"
    config_file.write_bytes(b"alertmanagers:\n- path_prefix: \xff\n")
    assert main(["render", str(config_file)]) == 1
    assert capsys.readouterr().out == ""


def test_render_command_reads_file(tmp_path, capsys):
    config_file = tmp_path / "alerting.yaml"
    config_file.write_bytes(b"alertmanagers:\n- timeout: 1s1ms\n")
    assert main(["render", str(config_file)]) == 0
    output = yaml.safe_load(capsys.readouterr().out)
    assert output["alertmanagers"][0]["timeout"] == "1s1ms"


def test_tree_command_directory(tmp_path):
    with patch("amcfg.tree.print") as mock_print:
        assert main(["tree", str(tmp_path)]) == 1
    assert "Error reading config" in mock_print.call_args[0][0]


def test_tree_command_invalid_utf8(tmp_path):
    config_file = tmp_path / "alerting.yaml"
    config_file.write_bytes(b"alertmanagers:\n- path_prefix: \xff\n")
    with patch("amcfg.tree.print") as mock_print:
        assert main(["tree", str(config_file)]) == 1
    assert "Error parsing config" in mock_print.call_args[0][0]
