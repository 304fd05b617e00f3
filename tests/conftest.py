import sys
import os

# 将项目根目录加入 sys.path，测试可直接导入 models/detectors/evaluators
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest
from hypothesis import settings

from models.data_models import LEFT_EYE, RIGHT_EYE

# CI profile: more examples for thorough testing
settings.register_profile("ci", max_examples=200)
# Dev profile: fewer examples for faster iteration
settings.register_profile("dev", max_examples=100)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "dev"))


def make_face(half_height: float = 1.5, eye_width: float = 10.0, num_landmarks: int = 468) -> np.ndarray:
    """
    构造一帧 FaceMesh 关键点，双眼 EAR = 2 * half_height / eye_width。

    默认 half_height=1.5 时 EAR 为 0.3（睁眼），0.5 时为 0.1（闭眼）。
    """
    points = np.zeros((num_landmarks, 2))
    for eye, ox in ((LEFT_EYE, 100.0), (RIGHT_EYE, 200.0)):
        oy = 100.0
        points[eye.p1] = (ox, oy)
        points[eye.p4] = (ox + eye_width, oy)
        points[eye.p2] = (ox + eye_width * 0.3, oy - half_height)
        points[eye.p6] = (ox + eye_width * 0.3, oy + half_height)
        points[eye.p3] = (ox + eye_width * 0.7, oy - half_height)
        points[eye.p5] = (ox + eye_width * 0.7, oy + half_height)
    return points


@pytest.fixture
def open_face():
    return make_face(half_height=1.5)


@pytest.fixture
def closed_face():
    return make_face(half_height=0.5)
