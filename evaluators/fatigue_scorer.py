"""PERCLOS 疲劳评分模块，基于滑动时间窗口计算闭眼时间占比并映射为 0-100 分"""

import logging
import math
import time
from collections import deque
from typing import Optional, Tuple

from models.data_models import (
    LEVEL_FATIGUE,
    LEVEL_MILD,
    LEVEL_NORMAL,
    FatigueScore,
    OpennessSample,
)

logger = logging.getLogger(__name__)

# 仅有一帧时使用的帧时长（约 30fps）
DEFAULT_FRAME_MS = 33.0

# 分数降为 0 的 PERCLOS (%)
ZERO_SCORE_PERCLOS = 45.0


def now_ms() -> float:
    """单调时钟的毫秒时间戳"""
    return time.monotonic() * 1000.0


def round_half_up(value: float, ndigits: int = 0) -> float:
    """四舍五入（0.5 进位），避免 round() 的银行家舍入"""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def score_from_perclos(
    perclos: float,
    normal_perclos: float = 15.0,
    fatigue_perclos: float = 20.0,
    zero_perclos: float = ZERO_SCORE_PERCLOS,
) -> Tuple[float, str]:
    """
    将 PERCLOS 百分比映射为分数和疲劳等级，三段线性且在分界处连续。

    - p < 15:        normal,       100 -> 80
    - 15 <= p < 20:  mild fatigue, 80 -> 60
    - p >= 20:       fatigue,      60 -> 0（p >= 45 时为 0）

    Returns:
        (未取整的分数, 等级)
    """
    if perclos >= fatigue_perclos:
        score = 60.0 * (zero_perclos - perclos) / (zero_perclos - fatigue_perclos)
        return max(0.0, score), LEVEL_FATIGUE
    if perclos >= normal_perclos:
        score = 80.0 - 20.0 * (perclos - normal_perclos) / (fatigue_perclos - normal_perclos)
        return score, LEVEL_MILD
    # 仅 fatigue 段截断到 0，normal 段不截断上限
    return 100.0 - 20.0 * perclos / normal_perclos, LEVEL_NORMAL


def is_closed(ratio: float, threshold: float) -> bool:
    """非有限值（眼宽为零、检测失败）一律视为睁眼"""
    return math.isfinite(ratio) and ratio < threshold


class PerclosScorer:
    """维护睁眼度历史，按时间窗口计算 PERCLOS 并输出疲劳评分"""

    def __init__(
        self,
        window_ms: float = 60000.0,
        ear_threshold: float = 0.2,
        normal_perclos: float = 15.0,
        fatigue_perclos: float = 20.0,
        start_time: Optional[float] = None,
    ):
        if window_ms <= 0:
            raise ValueError(f"window_ms 必须为正数: {window_ms}")
        if not 0 < normal_perclos < fatigue_perclos < ZERO_SCORE_PERCLOS:
            raise ValueError(
                f"PERCLOS 分界无效: normal={normal_perclos}, fatigue={fatigue_perclos}"
            )

        self.window_ms = window_ms
        self.ear_threshold = ear_threshold
        self.normal_perclos = normal_perclos
        self.fatigue_perclos = fatigue_perclos
        self.start_time = now_ms() if start_time is None else start_time
        self._history: deque = deque()

    @property
    def history(self) -> Tuple[OpennessSample, ...]:
        return tuple(self._history)

    def update(self, ratio: Optional[float], now: Optional[float] = None) -> None:
        """
        记录一帧睁眼度，并清理早于 now - 2 * window 的历史。

        时间戳回退的样本会被丢弃并记录警告。
        """
        if now is None:
            now = now_ms()
        ratio = math.nan if ratio is None else float(ratio)

        if self._history and now < self._history[-1].timestamp:
            logger.warning(
                "丢弃时间戳回退的样本: %.1f < %.1f", now, self._history[-1].timestamp
            )
            return

        self._history.append(OpennessSample(timestamp=now, ratio=ratio))
        logger.debug("EAR: %.3f 阈值: %.2f", ratio, self.ear_threshold)

        cutoff = now - self.window_ms * 2
        while self._history and self._history[0].timestamp <= cutoff:
            self._history.popleft()

    def perclos(self, now: Optional[float] = None) -> float:
        """计算当前窗口内的闭眼时间百分比"""
        if now is None:
            now = now_ms()

        cutoff = now - self.window_ms
        recent = [s for s in self._history if s.timestamp > cutoff]
        if not recent:
            return 0.0

        # 启动后不足一个窗口时以实际经过时间为分母
        window = min(now - self.start_time, self.window_ms)
        if window <= 0:
            return 0.0

        closed_ms = 0.0
        last = len(recent) - 1
        for i, sample in enumerate(recent):
            if i < last:
                duration = recent[i + 1].timestamp - sample.timestamp
            elif i > 0:
                duration = sample.timestamp - recent[i - 1].timestamp
            else:
                duration = DEFAULT_FRAME_MS

            if is_closed(sample.ratio, self.ear_threshold):
                closed_ms += duration

        return closed_ms / window * 100.0

    def get_score(self, now: Optional[float] = None) -> FatigueScore:
        """计算当前疲劳评分"""
        perclos = self.perclos(now)
        logger.debug("PERCLOS: %.1f%%", perclos)

        score, level = score_from_perclos(
            perclos, self.normal_perclos, self.fatigue_perclos
        )
        rounded = round_half_up(perclos, 1)
        return FatigueScore(
            score=int(round_half_up(score)),
            level=level,
            details=f"{rounded:.1f}%",
            perclos=rounded,
        )

    def reset(self, start_time: Optional[float] = None) -> None:
        """清空历史并重新开始计时"""
        self._history.clear()
        self.start_time = now_ms() if start_time is None else start_time
