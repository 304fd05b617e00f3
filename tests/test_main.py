"""Tests for main.py ReplaySystem - config loading and replay logic."""

import json

import pytest

from conftest import make_face
from main import ReplaySystem, _DEFAULTS, main
from models.data_models import LEVEL_FATIGUE, LEVEL_NORMAL


class TestLoadConfig:
    """Test ReplaySystem._load_config static method."""

    def test_no_config_path_returns_defaults(self):
        config = ReplaySystem._load_config(None)
        assert config == _DEFAULTS

    def test_valid_config_file(self, tmp_path):
        cfg = {
            "window_ms": 30000,
            "ear_threshold": 0.25,
            "normal_perclos": 10.0,
            "fatigue_perclos": 25.0,
            "measurement_duration_ms": 20000,
        }
        cfg_file = tmp_path / "config.json"
        cfg_file.write_text(json.dumps(cfg), encoding="utf-8")

        config = ReplaySystem._load_config(str(cfg_file))
        assert config == cfg

    def test_missing_config_file_uses_defaults(self, capsys):
        config = ReplaySystem._load_config("/nonexistent/path.json")
        assert config == _DEFAULTS
        captured = capsys.readouterr()
        assert "配置文件不存在" in captured.out

    def test_invalid_json_uses_defaults(self, tmp_path, capsys):
        cfg_file = tmp_path / "bad.json"
        cfg_file.write_text("not valid json {{{", encoding="utf-8")

        config = ReplaySystem._load_config(str(cfg_file))
        assert config == _DEFAULTS
        captured = capsys.readouterr()
        assert "配置文件格式错误" in captured.out

    def test_null_values_and_extra_fields(self, tmp_path):
        cfg = {"ear_threshold": None, "window_ms": 10000, "unknown_field": 999}
        cfg_file = tmp_path / "partial.json"
        cfg_file.write_text(json.dumps(cfg), encoding="utf-8")

        config = ReplaySystem._load_config(str(cfg_file))
        assert config["ear_threshold"] == _DEFAULTS["ear_threshold"]
        assert config["window_ms"] == 10000
        assert "unknown_field" not in config

    def test_scorer_uses_config(self, tmp_path):
        cfg_file = tmp_path / "config.json"
        cfg_file.write_text(json.dumps({"ear_threshold": 0.15}), encoding="utf-8")

        scorer = ReplaySystem(config_path=str(cfg_file)).make_scorer(0.0)
        assert scorer.ear_threshold == 0.15
        assert scorer.window_ms == _DEFAULTS["window_ms"]


class TestReplay:
    def test_empty_frames(self):
        assert ReplaySystem().replay([]) is None

    def test_ear_frames(self):
        frames = [
            {"timestamp": 0, "ear": 0.1},
            {"timestamp": 1000, "ear": 0.1},
            {"timestamp": 2000, "ear": 0.3},
        ]
        result = ReplaySystem().replay(frames)
        assert result.score == 0
        assert result.level == LEVEL_FATIGUE

    def test_landmark_frames_complete_session(self):
        face = make_face(half_height=1.5).tolist()
        frames = [{"timestamp": t, "landmarks": face} for t in range(0, 30001, 1000)]
        result = ReplaySystem().replay(frames)
        assert result.score == 100
        assert result.level == LEVEL_NORMAL

    def test_short_recording_scores_partial(self):
        face = make_face(half_height=0.5).tolist()
        frames = [{"timestamp": t, "landmarks": face} for t in range(0, 5001, 1000)]
        frames.append({"timestamp": 6000, "landmarks": None})
        result = ReplaySystem().replay(frames)
        assert result.level == LEVEL_FATIGUE


class TestMain:
    def test_prints_result(self, tmp_path, capsys):
        frames = [{"timestamp": t, "ear": 0.3} for t in range(0, 10001, 500)]
        input_file = tmp_path / "frames.json"
        input_file.write_text(json.dumps(frames), encoding="utf-8")

        assert main(["--input", str(input_file)]) == 0
        out = capsys.readouterr().out
        assert "normal" in out
        assert "100" in out
        assert "0.0%" in out

    def test_missing_input(self, capsys):
        assert main(["--input", "/nonexistent/frames.json"]) == 1
        assert "无法读取输入文件" in capsys.readouterr().out

    def test_empty_input(self, tmp_path, capsys):
        input_file = tmp_path / "frames.json"
        input_file.write_text("[]", encoding="utf-8")
        assert main(["--input", str(input_file)]) == 1
        assert "没有可用的帧数据" in capsys.readouterr().out
