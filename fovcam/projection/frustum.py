"""描画用の視錐台行列の構築。"""

from __future__ import annotations

import numpy as np


def make_frustum_matrix(
    near: float,
    far: float,
    implane_tl: np.ndarray,
    implane_br: np.ndarray,
) -> np.ndarray:
    """画像平面の外接矩形から軸ずれ透視投影行列を作成する。

    右手系で +Z がカメラ前方の座標系を、正規クリップ空間 [-1, 1]^3 に写す。
    glFrustum の -Z 前方の規約とは第3列（Z の係数）の符号が反転する。

    Args:
        near: 近クリップ面までの距離
        far: 遠クリップ面までの距離
        implane_tl: 正規化ユークリッド平面上の外接矩形の左上
        implane_br: 正規化ユークリッド平面上の外接矩形の右下

    Returns:
        4x4 投影行列
    """
    near = np.float64(near)
    far = np.float64(far)
    m4 = np.zeros((4, 4), dtype=np.float64)

    left = implane_tl[0] * near
    right = implane_br[0] * near
    top = implane_tl[1] * near
    bottom = implane_br[1] * near

    with np.errstate(divide="ignore", invalid="ignore"):
        m4[0, 0] = (2 * near) / (right - left)
        m4[1, 1] = (2 * near) / (top - bottom)

        m4[0, 2] = (right + left) / (left - right)
        m4[1, 2] = (top + bottom) / (bottom - top)
        m4[2, 2] = (far + near) / (far - near)
        m4[3, 2] = 1.0

        m4[2, 3] = 2 * near * far / (near - far)

    return m4
