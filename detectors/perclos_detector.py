"""PERCLOS 疲劳检测器，将睁眼度估计与窗口评分组合为统一的检测接口"""

from typing import Optional

from detectors.eye_openness import EyeOpennessEstimator
from evaluators.fatigue_scorer import PerclosScorer
from models.data_models import FatigueScore


class PerclosDetector:
    """
    PERCLOS (Percentage of Eye Closure) 疲劳检测。

    与其他检测器共用同一组方法：update(landmarks)、get_score()、get_name()。
    基准: PERCLOS < 15% 正常，15%-20% 轻度疲劳，>= 20% 疲劳。
    """

    def __init__(
        self,
        estimator: Optional[EyeOpennessEstimator] = None,
        scorer: Optional[PerclosScorer] = None,
    ):
        self.estimator = estimator or EyeOpennessEstimator()
        self.scorer = scorer or PerclosScorer()
        self.last_ratio: Optional[float] = None

    def get_name(self) -> str:
        return "PERCLOS"

    def update(self, landmarks, now: Optional[float] = None) -> None:
        """根据一帧关键点更新内部状态"""
        self.last_ratio = self.estimator.estimate(landmarks)
        self.scorer.update(self.last_ratio, now)

    def get_score(self, now: Optional[float] = None) -> FatigueScore:
        return self.scorer.get_score(now)
