"""FOV カメラの内部パラメータ定義。

パラメータは画像サイズで正規化して保持するため、同じベクトルが異なる解像度でも有効です。

    fx = 焦点距離 X / 画像幅
    fy = 焦点距離 Y / 画像高さ
    cx = 主点 X / 画像幅
    cy = 主点 Y / 画像高さ
    w  = FOV 歪み角 [rad]（0 で歪みなし）
"""

from __future__ import annotations

from dataclasses import astuple, dataclass, replace

import numpy as np

NUM_CAMERA_PARAMETERS = 5

# パラメータベクトル内の歪み角のインデックス
DISTORTION_INDEX = NUM_CAMERA_PARAMETERS - 1


@dataclass(frozen=True)
class CameraParameters:
    """正規化されたカメラ内部パラメータ。

    デフォルト値は一般的な Web カメラ程度の画角（5m 先で約 10m x 10m）を想定。

    Attributes:
        fx: 正規化焦点距離 X
        fy: 正規化焦点距離 Y
        cx: 正規化主点 X
        cy: 正規化主点 Y
        w: FOV 歪み角 [rad]
    """

    fx: float = 0.5
    fy: float = 0.8
    cx: float = 0.5
    cy: float = 0.5
    w: float = 0.07

    def __post_init__(self) -> None:
        """各値を float に変換"""
        for name in ("fx", "fy", "cx", "cy", "w"):
            object.__setattr__(self, name, float(getattr(self, name)))

    def to_array(self) -> np.ndarray:
        """[fx, fy, cx, cy, w] の配列に変換"""
        return np.array(astuple(self), dtype=np.float64)

    def to_list(self) -> list[float]:
        """設定ファイル保存用のリストに変換"""
        return [float(v) for v in astuple(self)]

    @classmethod
    def from_array(cls, arr: np.ndarray | list) -> CameraParameters:
        """配列から作成。

        Args:
            arr: [fx, fy, cx, cy, w]

        Returns:
            CameraParameters

        Raises:
            ValueError: 要素数が 5 でない場合
        """
        values = np.asarray(arr, dtype=np.float64).flatten()
        if values.shape != (NUM_CAMERA_PARAMETERS,):
            raise ValueError(f"Camera parameters must have {NUM_CAMERA_PARAMETERS} elements, got {values.size}")
        return cls(*(float(v) for v in values))

    def has_distortion(self) -> bool:
        """歪み角が非ゼロか確認"""
        return self.w != 0.0

    def updated(self, delta: np.ndarray | list | CameraParameters) -> CameraParameters:
        """差分ベクトルを加算した新しいパラメータを返す。

        Args:
            delta: 5要素の差分ベクトル

        Returns:
            更新後の CameraParameters
        """
        if isinstance(delta, CameraParameters):
            delta = delta.to_array()
        return CameraParameters.from_array(self.to_array() + np.asarray(delta, dtype=np.float64))

    def without_distortion(self) -> CameraParameters:
        """歪み角をゼロにしたコピーを返す"""
        return replace(self, w=0.0)
