"""FOV 歪みのグリッド可視化"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import cv2
import numpy as np

if TYPE_CHECKING:
    from pathlib import Path

    from fovcam.projection.atan_camera import ATANCamera

logger = logging.getLogger(__name__)

# cv2 の描画座標として安全な範囲
_DRAW_LIMIT = 1e6


def _draw_grid(img: np.ndarray, grid: np.ndarray, color: tuple[int, int, int]) -> None:
    """(rows, cols, 2) の格子点を線で結ぶ"""
    pts = np.round(np.clip(np.nan_to_num(grid, nan=-_DRAW_LIMIT), -_DRAW_LIMIT, _DRAW_LIMIT)).astype(np.int32)
    rows, cols = pts.shape[:2]
    for j in range(rows):
        for i in range(cols - 1):
            cv2.line(img, tuple(int(v) for v in pts[j, i]), tuple(int(v) for v in pts[j, i + 1]), color, 1)
    for i in range(cols):
        for j in range(rows - 1):
            cv2.line(img, tuple(int(v) for v in pts[j, i]), tuple(int(v) for v in pts[j + 1, i]), color, 1)


def visualize_distortion_grid(
    camera: ATANCamera,
    grid_size: int = 40,
    output_path: Path | str | None = None,
) -> np.ndarray:
    """歪みをグリッドで可視化

    観測画像上の等間隔グリッド（青）と、その各点を歪み補正して
    ピンホールカメラで再投影した位置（赤）を描画する。

    Args:
        camera: カメラモデル
        grid_size: グリッドの間隔 [pixels]
        output_path: 出力パス

    Returns:
        可視化画像 (H, W, 3)
    """
    w, h = (int(round(v)) for v in camera.image_size)
    img = np.ones((h, w, 3), dtype=np.uint8) * 255

    # グリッド点を生成
    xs = np.arange(0, w, grid_size, dtype=np.float64)
    ys = np.arange(0, h, grid_size, dtype=np.float64)
    grid_x, grid_y = np.meshgrid(xs, ys)
    pixels = np.stack([grid_x.ravel(), grid_y.ravel()], axis=1)

    # 歪み補正後の正規化座標をピンホールモデルで画像に戻す
    cams = camera.unproject_points(pixels)
    undistorted = camera.center + camera.focal * cams

    _draw_grid(img, pixels.reshape(len(ys), len(xs), 2), (255, 200, 200))
    _draw_grid(img, undistorted.reshape(len(ys), len(xs), 2), (0, 0, 255))

    # ラベル
    cv2.putText(img, "Blue: Observed | Red: Undistorted", (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (0, 0, 0), 2)
    cv2.putText(
        img,
        f"w={camera.params.w:.4f}, max_r={camera.max_radius:.3f}",
        (10, 60),
        cv2.FONT_HERSHEY_SIMPLEX,
        0.5,
        (0, 0, 0),
        1,
    )

    if output_path:
        cv2.imwrite(str(output_path), img)
        logger.info(f"Distortion grid saved: {output_path}")

    return img
