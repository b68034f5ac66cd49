"""Reprojection error evaluation module for the FOV camera model."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from fovcam.models.camera_params import NUM_CAMERA_PARAMETERS

if TYPE_CHECKING:
    from fovcam.projection.atan_camera import ATANCamera

logger = logging.getLogger(__name__)


class ReprojectionErrorEvaluator:
    """再投影誤差評価クラス

    正規化ユークリッド座標の点をカメラで投影し、観測ピクセルとの誤差を計算します。
    外部の最適化器向けに残差ベクトルとパラメータヤコビアンも提供します。
    """

    def __init__(self, camera: ATANCamera):
        """ReprojectionErrorEvaluatorを初期化

        Args:
            camera: 評価に使うカメラモデル
        """
        self.camera = camera

        logger.info(f"ReprojectionErrorEvaluator initialized for camera '{camera.name}'")

    @staticmethod
    def _as_point_arrays(
        euclidean_points: list[tuple[float, float]] | np.ndarray,
        observed_pixels: list[tuple[float, float]] | np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        points = np.asarray(euclidean_points, dtype=np.float64).reshape(-1, 2)
        observed = np.asarray(observed_pixels, dtype=np.float64).reshape(-1, 2)
        if len(points) != len(observed):
            raise ValueError(f"点の数が一致しません: {len(points)} vs {len(observed)}")
        return points, observed

    def evaluate(
        self,
        euclidean_points: list[tuple[float, float]] | np.ndarray,
        observed_pixels: list[tuple[float, float]] | np.ndarray,
    ) -> dict[str, float | int | list[float]]:
        """再投影誤差を評価

        Args:
            euclidean_points: 正規化ユークリッド座標の点のリスト
            observed_pixels: 観測されたピクセル座標のリスト

        Returns:
            評価結果の辞書:
                - mean_error: 平均再投影誤差（ピクセル）
                - max_error: 最大再投影誤差（ピクセル）
                - min_error: 最小再投影誤差（ピクセル）
                - std_error: 標準偏差（ピクセル）
                - invalid_count: モデルの有効範囲外だった点の数
                - errors: 各点の誤差リスト
        """
        points, observed = self._as_point_arrays(euclidean_points, observed_pixels)

        if len(points) == 0:
            return {
                "mean_error": 0.0,
                "max_error": 0.0,
                "min_error": 0.0,
                "std_error": 0.0,
                "invalid_count": 0,
                "errors": [],
            }

        errors: list[float] = []
        invalid_count = 0
        for point, pixel in zip(points, observed, strict=True):
            projected = self.camera.project(point)
            if self.camera.invalid:
                invalid_count += 1
            errors.append(float(np.linalg.norm(projected - pixel)))

        if invalid_count:
            logger.warning(f"{invalid_count}点がカメラモデルの有効範囲外です")

        errors_array = np.array(errors)
        result: dict[str, float | int | list[float]] = {
            "mean_error": float(np.mean(errors_array)),
            "max_error": float(np.max(errors_array)),
            "min_error": float(np.min(errors_array)),
            "std_error": float(np.std(errors_array)),
            "invalid_count": invalid_count,
            "errors": errors,
        }

        logger.info(
            f"再投影誤差評価完了: 平均={result['mean_error']:.3f}px, "
            f"最大={result['max_error']:.3f}px, 標準偏差={result['std_error']:.3f}px"
        )

        return result

    def build_residuals(
        self,
        euclidean_points: list[tuple[float, float]] | np.ndarray,
        observed_pixels: list[tuple[float, float]] | np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        """残差ベクトルとカメラパラメータに対するヤコビアンを構築

        残差は (投影 - 観測) を点ごとに [du, dv] の順で並べたもの。

        Args:
            euclidean_points: 正規化ユークリッド座標の点 (N, 2)
            observed_pixels: 観測ピクセル座標 (N, 2)

        Returns:
            (残差 (2N,), ヤコビアン (2N, 5))
        """
        points, observed = self._as_point_arrays(euclidean_points, observed_pixels)

        residuals = np.zeros(2 * len(points), dtype=np.float64)
        jacobian = np.zeros((2 * len(points), NUM_CAMERA_PARAMETERS), dtype=np.float64)
        for i, (point, pixel) in enumerate(zip(points, observed, strict=True)):
            residuals[2 * i : 2 * i + 2] = self.camera.project(point) - pixel
            jacobian[2 * i : 2 * i + 2] = self.camera.get_camera_parameter_derivs()

        logger.debug(f"残差を構築しました: {len(points)}点")
        return residuals, jacobian
