"""FOV (ATAN) 歪みモデルモジュール。

Devernay-Faugeras の FOV モデルによる放射歪みの順変換と、その閉形式の逆変換を提供します。

歪み式 (w: 歪み角 [rad], ru: 歪みなし半径, rd: 歪みあり半径):
    rd = atan(2 * ru * tan(w / 2)) / w
    ru = tan(rd * w) / (2 * tan(w / 2))
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

# 中心付近の特異点を避けるための半径しきい値
RADIUS_EPSILON = 0.01


@dataclass(frozen=True)
class FovDistortion:
    """FOV 歪みモデルの定数をまとめたクラス。

    w == 0 の場合は歪みなし（ピンホール）として扱う。

    Attributes:
        w: 歪み角 [rad]
        two_tan_half_w: 2 * tan(w / 2)
        one_over_two_tan: 1 / (2 * tan(w / 2))
        inv_w: 1 / w
        enabled: 歪み補正が有効か (w != 0)
    """

    w: float = 0.0
    two_tan_half_w: float = field(init=False, default=0.0)
    one_over_two_tan: float = field(init=False, default=0.0)
    inv_w: float = field(init=False, default=0.0)
    enabled: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        """歪み定数を計算"""
        w = float(self.w)
        object.__setattr__(self, "w", w)
        if w != 0.0:
            two_tan_half_w = float(2.0 * np.tan(w / 2.0))
            object.__setattr__(self, "two_tan_half_w", two_tan_half_w)
            object.__setattr__(self, "one_over_two_tan", 1.0 / two_tan_half_w)
            object.__setattr__(self, "inv_w", 1.0 / w)
            object.__setattr__(self, "enabled", True)

    def factor(self, r: float | np.ndarray) -> float | np.ndarray:
        """歪みなし半径に掛ける歪み係数 rd / ru を返す。

        Args:
            r: 歪みなし半径（スカラーまたは配列）

        Returns:
            歪み係数。r < RADIUS_EPSILON では 1.0
        """
        radius = np.asarray(r, dtype=np.float64)
        if not self.enabled:
            result = np.ones_like(radius)
        else:
            with np.errstate(divide="ignore", invalid="ignore"):
                scaled = self.inv_w * np.arctan(radius * self.two_tan_half_w) / radius
            result = np.where(radius < RADIUS_EPSILON, 1.0, scaled)
        return float(result) if result.ndim == 0 else result

    def undistort_radius(self, rd: float | np.ndarray) -> float | np.ndarray:
        """歪みあり半径から歪みなし半径を返す（閉形式の逆変換）。

        Args:
            rd: 歪みあり半径（スカラーまたは配列）

        Returns:
            歪みなし半径 tan(rd * w) / (2 * tan(w / 2))
        """
        radius = np.asarray(rd, dtype=np.float64)
        if self.enabled:
            with np.errstate(invalid="ignore", over="ignore"):
                radius = np.tan(radius * self.w) * self.one_over_two_tan
        return float(radius) if radius.ndim == 0 else radius


def distortion_factor(r: float, w: float) -> float:
    """歪み角 w での歪み係数 s(r)"""
    return FovDistortion(w).factor(r)


def undistort_radius(rd: float, w: float) -> float:
    """歪み角 w での逆変換 invr(rd)"""
    return FovDistortion(w).undistort_radius(rd)
