"""投影・逆投影の純粋関数群。

正規化ユークリッド平面 (z=1) と画像平面の間の変換を、スケールとオフセットを
引数に取る形で実装する。ピクセル空間と UFB 空間の両方から共通で利用される。
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from fovcam.projection.distortion import RADIUS_EPSILON, FovDistortion


def freeze_array(arr: np.ndarray) -> np.ndarray:
    """配列を読み取り専用にして返す"""
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class ProjectionResult:
    """1回の投影または逆投影の中間結果。

    Attributes:
        cam: 歪みなし正規化ユークリッド座標 (2,)
        dist_cam: 歪みあり正規化ユークリッド座標 (2,)
        image: 画像平面上の座標 (2,)
        radius: 歪みなし半径
        dist_radius: 歪みあり半径
        factor: 歪み係数 dist_radius / radius
        invalid: 歪みなし半径がモデルの有効範囲を超えているか
    """

    cam: np.ndarray
    dist_cam: np.ndarray
    image: np.ndarray
    radius: float
    dist_radius: float
    factor: float
    invalid: bool


def project_to_plane(
    point: np.ndarray | tuple[float, float],
    scale: np.ndarray,
    offset: np.ndarray,
    distortion: FovDistortion,
    max_radius: float,
) -> ProjectionResult:
    """正規化ユークリッド座標を歪ませて画像平面に投影する。

    Args:
        point: 正規化ユークリッド座標 (x, y)
        scale: 焦点距離 (2,)
        offset: 主点 (2,)
        distortion: 歪みモデル
        max_radius: 有効な最大半径

    Returns:
        ProjectionResult
    """
    cam = np.array(point, dtype=np.float64).reshape(2)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        radius = float(np.hypot(cam[0], cam[1]))
        factor = distortion.factor(radius)
        dist_cam = factor * cam
        image = offset + scale * dist_cam

    return ProjectionResult(
        cam=freeze_array(cam),
        dist_cam=freeze_array(dist_cam),
        image=freeze_array(image),
        radius=radius,
        dist_radius=factor * radius,
        factor=factor,
        invalid=bool(radius > max_radius),
    )


def unproject_from_plane(
    image_point: np.ndarray | tuple[float, float],
    inv_scale: np.ndarray,
    offset: np.ndarray,
    distortion: FovDistortion,
    max_radius: float,
) -> ProjectionResult:
    """画像平面上の座標を歪み補正して正規化ユークリッド座標に逆投影する。

    キャッシュの factor には投影時と同じ向き（rd / ru）の値を格納する。

    Args:
        image_point: 画像平面上の座標
        inv_scale: 焦点距離の逆数 (2,)
        offset: 主点 (2,)
        distortion: 歪みモデル
        max_radius: 有効な最大半径

    Returns:
        ProjectionResult
    """
    image = np.array(image_point, dtype=np.float64).reshape(2)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        dist_cam = (image - offset) * inv_scale
        dist_radius = float(np.hypot(dist_cam[0], dist_cam[1]))
        radius = distortion.undistort_radius(dist_radius)
        undistort = np.float64(radius) / dist_radius if dist_radius > RADIUS_EPSILON else np.float64(1.0)
        cam = undistort * dist_cam
        factor = float(1.0 / undistort)

    return ProjectionResult(
        cam=freeze_array(cam),
        dist_cam=freeze_array(dist_cam),
        image=freeze_array(image),
        radius=radius,
        dist_radius=dist_radius,
        factor=factor,
        invalid=bool(radius > max_radius),
    )


def jacobian_from_terms(
    cam: np.ndarray,
    radius: float,
    factor: float,
    distortion: FovDistortion,
    focal: np.ndarray,
) -> np.ndarray:
    """投影の正規化ユークリッド座標に対する 2x2 ヤコビアンを計算する。

    pixel = focal * (s(r) * cam) + center の積の微分。s(r) の偏微分は
    ds/dx = (1/w * k / (1 + k^2 r^2) - s) * x / r^2, k = 2 tan(w/2)。

    Args:
        cam: 歪みなし正規化ユークリッド座標 (2,)
        radius: 歪みなし半径
        factor: 歪み係数 s(r)
        distortion: 歪みモデル
        focal: 焦点距離 (2,)

    Returns:
        [[d u/d x, d u/d y], [d v/d x, d v/d y]]
    """
    x, y = float(cam[0]), float(cam[1])
    k = distortion.two_tan_half_w
    ru = radius if distortion.enabled else 0.0

    # 中心付近では歪み係数の微分はゼロ
    if ru < RADIUS_EPSILON:
        dfrac_dx = 0.0
        dfrac_dy = 0.0
    else:
        common = (distortion.inv_w * k / (1.0 + k * k * ru * ru) - factor) / (ru * ru)
        dfrac_dx = common * x
        dfrac_dy = common * y

    return np.array(
        [
            [focal[0] * (dfrac_dx * x + factor), focal[0] * (dfrac_dy * x)],
            [focal[1] * (dfrac_dx * y), focal[1] * (dfrac_dy * y + factor)],
        ],
        dtype=np.float64,
    )
