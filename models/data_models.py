"""核心数据模型定义"""

from dataclasses import dataclass
from typing import Optional

# 疲劳等级
LEVEL_NORMAL = "normal"
LEVEL_MILD = "mild fatigue"
LEVEL_FATIGUE = "fatigue"


@dataclass(frozen=True)
class Landmark:
    """单个人脸关键点（像素坐标）"""
    x: float
    y: float
    z: Optional[float] = None


@dataclass(frozen=True)
class EyeIndices:
    """单只眼睛的 6 个关键点索引：p1/p4 为眼角，p2-p6、p3-p5 为上下眼睑点对"""
    p1: int
    p2: int
    p3: int
    p4: int
    p5: int
    p6: int


@dataclass(frozen=True)
class OpennessSample:
    """一帧的睁眼度记录"""
    timestamp: float
    ratio: float


@dataclass(frozen=True)
class FatigueScore:
    """疲劳评分结果"""
    score: int
    level: str
    details: str
    perclos: float


# MediaPipe FaceMesh 眼部关键点
LEFT_EYE = EyeIndices(p1=33, p2=160, p3=158, p4=133, p5=153, p6=144)
RIGHT_EYE = EyeIndices(p1=362, p2=385, p3=387, p4=263, p5=373, p6=380)
