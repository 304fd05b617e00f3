"""睁眼度估计模块，根据人脸关键点计算双眼平均 EAR 值"""

import math

import numpy as np

from models.data_models import LEFT_EYE, RIGHT_EYE, EyeIndices


def to_points(landmarks) -> np.ndarray:
    """
    将一帧关键点统一转换为 (N, 2) 的浮点数组。

    Args:
        landmarks: (N, 2) / (N, 3) 数组、(x, y[, z]) 元组序列，
                   或带 .x/.y 属性的对象序列（Landmark、MediaPipe 关键点等）

    Returns:
        仅包含 x、y 的 numpy 数组
    """
    if isinstance(landmarks, np.ndarray):
        return np.asarray(landmarks, dtype=float)[:, :2]

    points = [
        (lm.x, lm.y) if hasattr(lm, "x") else (lm[0], lm[1])
        for lm in landmarks
    ]
    return np.asarray(points, dtype=float).reshape(-1, 2)


def calculate_ear(points: np.ndarray, indices: EyeIndices) -> float:
    """
    计算单只眼睛的 EAR 值。

    公式: EAR = (|p2-p6| + |p3-p5|) / (2 * |p1-p4|)

    索引越界时直接抛出 IndexError。眼宽为零时返回 inf
    （上下距离也为零时返回 nan），由评分模块按睁眼处理。
    """
    vertical_1 = float(np.linalg.norm(points[indices.p2] - points[indices.p6]))
    vertical_2 = float(np.linalg.norm(points[indices.p3] - points[indices.p5]))
    horizontal = float(np.linalg.norm(points[indices.p1] - points[indices.p4]))

    if horizontal == 0.0:
        return math.nan if vertical_1 + vertical_2 == 0.0 else math.inf

    return (vertical_1 + vertical_2) / (2.0 * horizontal)


class EyeOpennessEstimator:
    """无状态的睁眼度估计器，输出左右眼 EAR 的平均值"""

    def __init__(self, left: EyeIndices = LEFT_EYE, right: EyeIndices = RIGHT_EYE):
        self.left = left
        self.right = right

    def estimate(self, landmarks, left: EyeIndices = None, right: EyeIndices = None) -> float:
        """
        计算一帧的双眼平均睁眼度。

        Args:
            landmarks: 一帧人脸关键点，格式见 to_points()
            left: 左眼索引，默认使用构造时的配置
            right: 右眼索引，默认使用构造时的配置

        Returns:
            (左眼 EAR + 右眼 EAR) / 2
        """
        points = to_points(landmarks)
        left_ear = calculate_ear(points, left or self.left)
        right_ear = calculate_ear(points, right or self.right)
        return (left_ear + right_ear) / 2.0
