"""定时测量模块：在固定时长内持续喂入关键点，结束时输出一次疲劳评分"""

import logging
import math
from typing import Callable, Optional

from detectors.perclos_detector import PerclosDetector
from evaluators.fatigue_scorer import PerclosScorer
from models.data_models import FatigueScore

logger = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_MEASURING = "measuring"
STATE_COMPLETE = "complete"


class SpotCheckSession:
    """管理一次定时测量的开始、进度、完成与取消"""

    def __init__(
        self,
        duration_ms: float = 30000.0,
        detector_factory: Callable[[float], PerclosDetector] = None,
    ):
        if duration_ms <= 0:
            raise ValueError(f"duration_ms 必须为正数: {duration_ms}")
        self.duration_ms = duration_ms
        self._detector_factory = detector_factory or _default_detector
        self.detector: Optional[PerclosDetector] = None
        self.state = STATE_IDLE
        self.start_time = 0.0
        self.result: Optional[FatigueScore] = None

    def start(self, now: float) -> None:
        """创建新的检测器并开始计时"""
        self.detector = self._detector_factory(now)
        self.start_time = now
        self.result = None
        self.state = STATE_MEASURING
        logger.info("开始测量，时长 %.0f ms", self.duration_ms)

    def feed(self, landmarks, now: float) -> bool:
        """
        处理一帧数据。

        Args:
            landmarks: 一帧人脸关键点；未检测到人脸时为 None
            now: 当前时间戳（毫秒）

        Returns:
            测量是否已完成
        """
        if self.state != STATE_MEASURING:
            raise RuntimeError(f"当前状态无法处理帧: {self.state}")

        if landmarks is not None:
            self.detector.update(landmarks, now)

        if self.elapsed(now) >= self.duration_ms:
            self._complete(now)
            return True
        return False

    def elapsed(self, now: float) -> float:
        return now - self.start_time

    def remaining_seconds(self, now: float) -> int:
        remaining = max(0.0, self.duration_ms - self.elapsed(now))
        return math.ceil(remaining / 1000.0)

    def progress(self, now: float) -> float:
        """已完成的百分比，上限 100"""
        return min(100.0, self.elapsed(now) / self.duration_ms * 100.0)

    def cancel(self) -> None:
        self.detector = None
        self.result = None
        self.state = STATE_IDLE
        logger.info("测量已取消")

    def _complete(self, now: float) -> None:
        self.result = self.detector.get_score(now)
        self.state = STATE_COMPLETE
        logger.info(
            "测量完成: %s 分, %s, PERCLOS %s",
            self.result.score, self.result.level, self.result.details,
        )


def _default_detector(now: float) -> PerclosDetector:
    return PerclosDetector(scorer=PerclosScorer(start_time=now))
