"""Tests for the configuration resolver and Configuration contract."""

from pathlib import Path

import pytest
import yaml

from pdflow.core.config_resolver import USAGE, load_configuration, resolve_configuration
from pdflow.core.contracts import RESOLUTION_TIERS, Configuration
from pdflow.core.errors import HelpRequested, InvalidArgument

VALUE_FLAGS = ["--rows", "--i1", "--i2", "--idir", "--z1", "--z2", "--zdir", "--out"]


class TestDefaults:
    def test_empty_tokens(self):
        cfg = resolve_configuration([])
        assert cfg.rows == 240
        assert cfg.intensity_1 == Path("i1.png")
        assert cfg.intensity_2 == Path("i2.png")
        assert cfg.depth_1 == Path("z1.png")
        assert cfg.depth_2 == Path("z2.png")
        assert cfg.intensity_dir is None
        assert cfg.depth_dir is None
        assert cfg.output_root == "pdflow"
        assert cfg.no_show is False
        assert cfg.directory_mode is False

    def test_configuration_is_frozen(self):
        cfg = Configuration()
        with pytest.raises(Exception):
            cfg.rows = 480


class TestRows:
    @pytest.mark.parametrize("rows", RESOLUTION_TIERS)
    def test_valid_tiers(self, rows):
        assert resolve_configuration(["--rows", str(rows)]).rows == rows

    @pytest.mark.parametrize("value", ["0", "16", "100", "241", "960", "-240", "abc", "240.0", ""])
    def test_invalid_tiers(self, value):
        with pytest.raises(InvalidArgument):
            resolve_configuration(["--rows", value])

    @pytest.mark.parametrize("value", ["+240", " 240 ", "2_40", "２４０"])
    def test_only_plain_digits(self, value):
        with pytest.raises(InvalidArgument) as exc:
            resolve_configuration(["--rows", value])
        assert exc.value.token == value

    def test_model_rejects_invalid_tier(self):
        with pytest.raises(ValueError):
            Configuration(rows=100)

    def test_cols_follow_4_3_aspect(self):
        assert Configuration(rows=480).cols == 640
        assert Configuration(rows=15).cols == 20


class TestTokens:
    def test_all_flags(self):
        cfg = resolve_configuration([
            "--rows", "120",
            "--i1", "a.png", "--i2", "b.png",
            "--z1", "za.png", "--z2", "zb.png",
            "--idir", "rgb", "--zdir", "depth",
            "--out", "results/run",
            "--no-show",
        ])
        assert cfg.rows == 120
        assert cfg.intensity_1 == Path("a.png")
        assert cfg.depth_2 == Path("zb.png")
        assert cfg.intensity_dir == Path("rgb")
        assert cfg.depth_dir == Path("depth")
        assert cfg.output_root == "results/run"
        assert cfg.no_show is True
        assert cfg.directory_mode is True

    @pytest.mark.parametrize("flag", VALUE_FLAGS)
    def test_missing_value(self, flag):
        with pytest.raises(InvalidArgument) as exc:
            resolve_configuration(["--no-show", flag])
        assert exc.value.token == flag

    def test_value_may_look_like_flag(self):
        cfg = resolve_configuration(["--out", "--no-show"])
        assert cfg.output_root == "--no-show"
        assert cfg.no_show is False

    @pytest.mark.parametrize("token", ["--bogus", "positional", "-h", "--rows=240"])
    def test_unrecognized_token(self, token):
        with pytest.raises(InvalidArgument) as exc:
            resolve_configuration([token])
        assert exc.value.token == token

    def test_single_directory_stays_explicit(self):
        cfg = resolve_configuration(["--idir", "rgb"])
        assert cfg.directory_mode is False


class TestHelp:
    def test_help_alone(self):
        with pytest.raises(HelpRequested):
            resolve_configuration(["--help"])

    def test_help_after_valid_tokens(self):
        with pytest.raises(HelpRequested):
            resolve_configuration(["--rows", "60", "--help", "--bogus"])

    def test_error_before_help_wins(self):
        with pytest.raises(InvalidArgument):
            resolve_configuration(["--bogus", "--help"])

    def test_help_is_not_invalid_argument(self):
        assert not issubclass(HelpRequested, InvalidArgument)

    def test_usage_lists_every_flag(self):
        for flag in VALUE_FLAGS + ["--help", "--no-show"]:
            assert flag in USAGE


class TestYamlBase:
    def test_tokens_override_yaml(self, tmp_path: Path):
        config_file = tmp_path / "run.yaml"
        with open(config_file, "w") as f:
            yaml.dump({"rows": 60, "output_root": "from_yaml", "no_show": True}, f)

        base = load_configuration(config_file)
        assert base.rows == 60
        cfg = resolve_configuration(["--rows", "30"], base=base)
        assert cfg.rows == 30
        assert cfg.output_root == "from_yaml"
        assert cfg.no_show is True

    def test_yaml_invalid_tier(self, tmp_path: Path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("rows: 100\n")
        with pytest.raises(InvalidArgument):
            load_configuration(config_file)

    def test_yaml_unknown_key(self, tmp_path: Path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("colour: red\n")
        with pytest.raises(InvalidArgument):
            load_configuration(config_file)

    def test_empty_yaml_gives_defaults(self, tmp_path: Path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert load_configuration(config_file) == Configuration()
