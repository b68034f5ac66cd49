"""カメラパラメータから導出される状態の計算。

正規化パラメータと画像サイズから、ピクセル空間の焦点距離・主点、歪み定数、
モデルの有効半径、1ピクセルあたりのユークリッド距離、UFB 線形写像の係数を求めます。
導出状態は不変値として扱い、パラメータや画像サイズが変わるたびに再計算します。
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from fovcam.models.camera_params import CameraParameters
from fovcam.projection.distortion import FovDistortion
from fovcam.projection.operations import freeze_array, unproject_from_plane

logger = logging.getLogger(__name__)

# 境界ピクセルを描画キャンバス内に収めるための主点オフセット [pixel]
PIXEL_CENTER_OFFSET = 0.5

# 画像内の最大半径に対するモデル有効範囲の倍率
MAX_RADIUS_SCALE = 1.5


@dataclass(frozen=True)
class DerivedState:
    """パラメータと画像サイズから導出される状態。

    Attributes:
        image_size: 画像サイズ (width, height) [pixel]
        focal: 焦点距離 (fx, fy) [pixel]
        center: 主点 (cx, cy) [pixel]
        inv_focal: 焦点距離の逆数
        distortion: 歪みモデル定数
        largest_radius: 画像内で最も遠い隅の歪みなし半径
        max_radius: モデルが有効な最大の歪みなし半径
        one_pixel_dist: 画像中心での1ピクセルの正規化ユークリッド距離
        implane_tl: 画像隅を逆投影した外接矩形の左上
        implane_br: 画像隅を逆投影した外接矩形の右下
        ufb_linear_focal: 外接矩形を単位矩形に写すスケール
        ufb_linear_inv_focal: ufb_linear_focal の逆数（外接矩形の大きさ）
        ufb_linear_center: 外接矩形を単位矩形に写すオフセット
    """

    image_size: np.ndarray
    focal: np.ndarray
    center: np.ndarray
    inv_focal: np.ndarray
    distortion: FovDistortion
    largest_radius: float
    max_radius: float
    one_pixel_dist: float
    implane_tl: np.ndarray
    implane_br: np.ndarray
    ufb_linear_focal: np.ndarray
    ufb_linear_inv_focal: np.ndarray
    ufb_linear_center: np.ndarray


def compute_derived_state(params: CameraParameters, image_size: np.ndarray | tuple[float, float]) -> DerivedState:
    """導出状態を計算する。

    入力の検証は行わない。焦点距離ゼロなどの退化したパラメータでは inf / NaN がそのまま伝播する。

    Args:
        params: 正規化カメラパラメータ
        image_size: 画像サイズ (width, height) [pixel]

    Returns:
        DerivedState
    """
    size = np.array(image_size, dtype=np.float64).reshape(2)
    p = params.to_array()
    distortion = FovDistortion(params.w)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        focal = size * p[0:2]
        center = size * p[2:4] - PIXEL_CENTER_OFFSET
        inv_focal = 1.0 / focal

        # 主点から最も遠い画像の隅（[0, 1] 正規化座標で計算）
        farthest = np.maximum(p[2:4], 1.0 - p[2:4]) / p[0:2]
        largest_radius = float(distortion.undistort_radius(float(np.hypot(farthest[0], farthest[1]))))
        max_radius = MAX_RADIUS_SCALE * largest_radius

        def unproject(pixel: np.ndarray) -> np.ndarray:
            return unproject_from_plane(pixel, inv_focal, center, distortion, max_radius).cam

        # 画像中心と (+1, +1) 離れた点の距離から1ピクセルの大きさを求める
        center_cam = unproject(0.5 * size)
        root_two_away = unproject(0.5 * size + np.array([1.0, 1.0]))
        one_pixel_dist = float(np.linalg.norm(center_cam - root_two_away) / np.sqrt(2.0))

        # 画像の四隅を逆投影して外接矩形を求める
        corners = np.array(
            [
                [-0.5, -0.5],
                [size[0] - 0.5, -0.5],
                [size[0] - 0.5, size[1] - 0.5],
                [-0.5, size[1] - 0.5],
            ],
            dtype=np.float64,
        )
        verts = np.array([unproject(corner) for corner in corners])
        implane_tl = verts.min(axis=0)
        implane_br = verts.max(axis=0)

        ufb_linear_inv_focal = implane_br - implane_tl
        ufb_linear_focal = 1.0 / ufb_linear_inv_focal
        ufb_linear_center = -1.0 * implane_tl * ufb_linear_focal

    logger.debug(
        f"Derived state refreshed: size={size.tolist()}, focal={focal.tolist()}, "
        f"center={center.tolist()}, w={distortion.w}, max_radius={max_radius:.4f}"
    )

    return DerivedState(
        image_size=freeze_array(size),
        focal=freeze_array(focal),
        center=freeze_array(center),
        inv_focal=freeze_array(inv_focal),
        distortion=distortion,
        largest_radius=largest_radius,
        max_radius=max_radius,
        one_pixel_dist=one_pixel_dist,
        implane_tl=freeze_array(implane_tl),
        implane_br=freeze_array(implane_br),
        ufb_linear_focal=freeze_array(ufb_linear_focal),
        ufb_linear_inv_focal=freeze_array(ufb_linear_inv_focal),
        ufb_linear_center=freeze_array(ufb_linear_center),
    )
