"""
Test the command line tool against a throwaway database.
"""
import json
import os
import pytest
import tempfile
import shutil
from burn_boost.cli import main
from burn_boost.config import Config

TOKEN_HEX = "50" * 20


@pytest.fixture
def workdir():
    temp_dir = tempfile.mkdtemp()
    config = Config.default()
    config.database.path = os.path.join(temp_dir, "db")
    config_path = os.path.join(temp_dir, "config.json")
    config.to_file(config_path)
    yield temp_dir, config_path
    shutil.rmtree(temp_dir)


def run(config_path, *args):
    return main(["--config", config_path, *args])


class TestConfig:
    def test_file_round_trip(self, workdir):
        _, config_path = workdir
        loaded = Config.from_file(config_path)
        assert loaded.to_dict()['token'] == Config.default().to_dict()['token']
        assert loaded.token.symbol == "BBT"
        assert loaded.database.path.endswith("db")

    def test_missing_sections_use_defaults(self, workdir):
        temp_dir, _ = workdir
        path = os.path.join(temp_dir, "partial.json")
        with open(path, 'w') as f:
            json.dump({'token': {'symbol': 'ASH'}}, f)
        config = Config.from_file(path)
        assert config.token.symbol == "ASH"
        assert config.token.decimals == 9
        assert config.monitoring.enabled is False


class TestCommands:
    def test_keygen_init_burn_status(self, workdir, capsys):
        temp_dir, config_path = workdir
        key_path = os.path.join(temp_dir, "authority.pem")

        assert run(config_path, "keygen", "--output", key_path) == 0
        assert os.path.exists(key_path)

        assert run(config_path, "init", "--key", key_path, "--token", TOKEN_HEX) == 0
        assert run(config_path, "burn", "--key", key_path, "--token", TOKEN_HEX, "--amount", "100000") == 0
        out = capsys.readouterr().out
        assert "Token initialized successfully!" in out
        assert "10000bp -> 10100bp" in out

        assert run(config_path, "status", "--token", TOKEN_HEX) == 0
        out = capsys.readouterr().out
        assert "Burned: 10.00%" in out
        assert "Remaining: 90.00%" in out
        assert "Burn Transactions: 1" in out

    def test_preview_and_projections(self, workdir, capsys):
        temp_dir, config_path = workdir
        key_path = os.path.join(temp_dir, "authority.pem")
        run(config_path, "keygen", "--output", key_path)
        run(config_path, "init", "--key", key_path, "--token", TOKEN_HEX)
        capsys.readouterr()

        assert run(config_path, "preview", "--token", TOKEN_HEX, "--amount", "50000") == 0
        assert "Multiplier: 10050bp" in capsys.readouterr().out

        assert run(config_path, "projections", "--token", TOKEN_HEX, "--percentages", "10") == 0
        assert "10% more burned" in capsys.readouterr().out

    def test_sub_unit_burn_is_refused(self, workdir, capsys):
        temp_dir, config_path = workdir
        key_path = os.path.join(temp_dir, "authority.pem")
        run(config_path, "keygen", "--output", key_path)
        run(config_path, "init", "--key", key_path, "--token", TOKEN_HEX)
        capsys.readouterr()

        assert run(config_path, "burn", "--key", key_path, "--token", TOKEN_HEX,
                   "--amount", "0.0000000019") == 1
        assert "decimal places" in capsys.readouterr().err

        assert run(config_path, "status", "--token", TOKEN_HEX) == 0
        assert "Burn Transactions: 0" in capsys.readouterr().out

    @pytest.mark.parametrize("amount", ["abc", "nan", "inf"])
    def test_non_numeric_amount_is_an_error(self, workdir, capsys, amount):
        temp_dir, config_path = workdir
        key_path = os.path.join(temp_dir, "authority.pem")
        run(config_path, "keygen", "--output", key_path)
        run(config_path, "init", "--key", key_path, "--token", TOKEN_HEX)
        capsys.readouterr()

        assert run(config_path, "preview", "--token", TOKEN_HEX, "--amount", amount) == 1
        assert "Error:" in capsys.readouterr().err

    def test_bad_hex_token_is_an_error(self, workdir, capsys):
        _, config_path = workdir
        assert run(config_path, "status", "--token", "zz") == 1
        assert "Not a hex address" in capsys.readouterr().err

    def test_unknown_token_fails(self, workdir, capsys):
        _, config_path = workdir
        assert run(config_path, "status", "--token", TOKEN_HEX) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_sample_config(self, workdir):
        temp_dir, config_path = workdir
        output = os.path.join(temp_dir, "sample.json")
        assert run(config_path, "sample-config", "--output", output) == 0
        assert Config.from_file(output).to_dict() == Config.default().to_dict()
