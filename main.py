"""PERCLOS 疲劳评估入口文件：回放录制的关键点 / EAR 序列并输出疲劳评分"""

import argparse
import json
import logging
import sys

from detectors.perclos_detector import PerclosDetector
from evaluators.fatigue_scorer import PerclosScorer
from evaluators.spot_check import SpotCheckSession

# 默认参数
_DEFAULTS = {
    "window_ms": 60000,
    "ear_threshold": 0.2,
    "normal_perclos": 15.0,
    "fatigue_perclos": 20.0,
    "measurement_duration_ms": 30000,
}


class ReplaySystem:
    """按帧回放录制数据，驱动定时测量或直接驱动评分器。"""

    def __init__(self, config_path=None):
        self.config = self._load_config(config_path)

    @staticmethod
    def _load_config(config_path):
        """从 JSON 配置文件加载参数，缺失字段使用默认值。"""
        config = dict(_DEFAULTS)

        if config_path is None:
            return config

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            print(f"警告: 配置文件不存在 {config_path}，使用默认参数")
            return config
        except json.JSONDecodeError:
            print(f"警告: 配置文件格式错误 {config_path}，使用默认参数")
            return config

        # 用配置文件中的值覆盖默认值
        for key in _DEFAULTS:
            if key in data and data[key] is not None:
                config[key] = data[key]

        return config

    def make_scorer(self, start_time):
        return PerclosScorer(
            window_ms=self.config["window_ms"],
            ear_threshold=self.config["ear_threshold"],
            normal_perclos=self.config["normal_perclos"],
            fatigue_perclos=self.config["fatigue_perclos"],
            start_time=start_time,
        )

    def replay(self, frames):
        """
        回放帧序列并返回最终评分。

        Args:
            frames: [{"timestamp": ms, "landmarks": [[x, y], ...] | None}, ...]
                    或 [{"timestamp": ms, "ear": float}, ...]

        Returns:
            FatigueScore；帧序列为空时返回 None
        """
        if not frames:
            return None

        start = frames[0]["timestamp"]

        if "ear" in frames[0]:
            scorer = self.make_scorer(start)
            for frame in frames:
                scorer.update(frame["ear"], frame["timestamp"])
            return scorer.get_score(frames[-1]["timestamp"])

        session = SpotCheckSession(
            duration_ms=self.config["measurement_duration_ms"],
            detector_factory=lambda now: PerclosDetector(scorer=self.make_scorer(now)),
        )
        session.start(start)
        for frame in frames:
            if session.feed(frame.get("landmarks"), frame["timestamp"]):
                return session.result

        # 录制时长不足一次测量，按最后一帧的时间给出当前评分
        return session.detector.get_score(frames[-1]["timestamp"])


def _load_frames(input_path):
    with open(input_path, "r", encoding="utf-8") as f:
        return json.load(f)


def main(argv=None):
    parser = argparse.ArgumentParser(description="PERCLOS 疲劳评估")
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="录制帧序列的 JSON 文件路径",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON 参数配置文件路径",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="输出逐帧调试日志",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        frames = _load_frames(args.input)
    except (OSError, json.JSONDecodeError) as e:
        print(f"无法读取输入文件 {args.input}: {e}")
        return 1

    result = ReplaySystem(config_path=args.config).replay(frames)
    if result is None:
        print("没有可用的帧数据")
        return 1

    print(f"等级: {result.level}")
    print(f"分数: {result.score}")
    print(f"PERCLOS: {result.details}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
