"""FOV (ATAN) 歪みを持つピンホールカメラモデル。

座標系の定義:
    - Image (Pixel): (u, v), 左上原点。主点は画像サイズ x 正規化主点 - 0.5
    - Euclidean (z=1): (x, y) = (X/Z, Y/Z), 歪みなしの正規化カメラ平面
    - UFB: 正規化パラメータをそのままスケール・オフセットとして使う描画用平面

投影・逆投影を呼ぶと直近の中間結果（ProjectionResult）を保持し、
get_projection_derivs() / get_camera_parameter_derivs() はその点で評価される。
同じインスタンスを複数スレッドから同時に使うことはできない。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from fovcam.config.parameter_store import CameraParameterStore
from fovcam.models.camera_params import DISTORTION_INDEX, NUM_CAMERA_PARAMETERS, CameraParameters
from fovcam.projection.derived_state import DerivedState, compute_derived_state
from fovcam.projection.distortion import RADIUS_EPSILON
from fovcam.projection.frustum import make_frustum_matrix
from fovcam.projection.operations import (
    ProjectionResult,
    jacobian_from_terms,
    project_to_plane,
    unproject_from_plane,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

# 数値微分の刻み幅
PARAMETER_STEP = 0.001


class ProjectionStateError(RuntimeError):
    """投影を一度も行っていない状態でヤコビアンを要求した場合のエラー"""


def project_point(state: DerivedState, point: Sequence[float] | np.ndarray) -> ProjectionResult:
    """正規化ユークリッド座標をピクセル座標に投影する"""
    return project_to_plane(point, state.focal, state.center, state.distortion, state.max_radius)


def unproject_point(state: DerivedState, pixel: Sequence[float] | np.ndarray) -> ProjectionResult:
    """ピクセル座標を正規化ユークリッド座標に逆投影する"""
    return unproject_from_plane(pixel, state.inv_focal, state.center, state.distortion, state.max_radius)


def ufb_project_point(
    state: DerivedState,
    params: CameraParameters,
    point: Sequence[float] | np.ndarray,
) -> ProjectionResult:
    """正規化ユークリッド座標を UFB 平面に投影する"""
    p = params.to_array()
    return project_to_plane(point, p[0:2], p[2:4], state.distortion, state.max_radius)


def ufb_unproject_point(
    state: DerivedState,
    params: CameraParameters,
    ufb_point: Sequence[float] | np.ndarray,
) -> ProjectionResult:
    """UFB 平面上の座標を正規化ユークリッド座標に逆投影する"""
    p = params.to_array()
    with np.errstate(divide="ignore"):
        inv_scale = 1.0 / p[0:2]
    return unproject_from_plane(ufb_point, inv_scale, p[2:4], state.distortion, state.max_radius)


def projection_jacobian(state: DerivedState, point: Sequence[float] | np.ndarray) -> np.ndarray:
    """指定した正規化ユークリッド座標での投影の 2x2 ヤコビアン。

    Args:
        state: 導出状態
        point: 正規化ユークリッド座標 (x, y)

    Returns:
        d(pixel) / d(point) の 2x2 行列
    """
    result = project_point(state, point)
    return jacobian_from_terms(result.cam, result.radius, result.factor, state.distortion, state.focal)


def camera_parameter_jacobian(
    params: CameraParameters,
    image_size: Sequence[float] | np.ndarray,
    point: Sequence[float] | np.ndarray,
    step: float = PARAMETER_STEP,
) -> np.ndarray:
    """投影のカメラパラメータに対する 2x5 ヤコビアンを前進差分で計算する。

    入力を変更せず、摂動ごとに導出状態を新しく計算する。
    歪み角がゼロの場合、歪み角の列はゼロのままにする。

    Args:
        params: 正規化カメラパラメータ
        image_size: 画像サイズ (width, height)
        point: 正規化ユークリッド座標 (x, y)
        step: 差分の刻み幅

    Returns:
        d(pixel) / d(params) の 2x5 行列
    """
    derivs = np.zeros((2, NUM_CAMERA_PARAMETERS), dtype=np.float64)
    base_params = params.to_array()
    base_out = project_point(compute_derived_state(params, image_size), point).image

    for i in range(NUM_CAMERA_PARAMETERS):
        # 歪みが無効なら歪み角の微分は計算しない
        if i == DISTORTION_INDEX and not params.has_distortion():
            continue

        update = np.zeros(NUM_CAMERA_PARAMETERS, dtype=np.float64)
        update[i] += step
        perturbed = CameraParameters.from_array(base_params + update)
        out = project_point(compute_derived_state(perturbed, image_size), point).image
        derivs[:, i] = (out - base_out) / step

    return derivs


class ATANCamera:
    """FOV 歪みモデルのカメラ。

    パラメータはストアから "<name>.Parameters" キーで読み込み、更新時はストアに書き戻す。
    パラメータまたは画像サイズが変わると導出状態をすべて再計算する。
    """

    def __init__(
        self,
        name: str,
        image_size: Sequence[float] | np.ndarray = (640, 480),
        store: CameraParameterStore | None = None,
    ):
        """初期化

        Args:
            name: カメラ名（パラメータのキーに使用）
            image_size: 画像サイズ (width, height) [pixel]
            store: パラメータストア（省略時はメモリ上のストア）
        """
        self.name = name
        self._store = store if store is not None else CameraParameterStore()
        self._params = self._store.get(name)
        self._image_size = np.array(image_size, dtype=np.float64).reshape(2)
        self._last: ProjectionResult | None = None
        self._state = compute_derived_state(self._params, self._image_size)

        self._store.subscribe(name, self._on_parameters_changed)

        logger.info(
            f"ATANCamera '{name}' initialized: size={self._image_size.tolist()}, params={self._params.to_list()}"
        )

    # ------------------------------------------------------------------
    # 状態
    # ------------------------------------------------------------------

    @property
    def params(self) -> CameraParameters:
        """現在の正規化パラメータ"""
        return self._params

    @property
    def state(self) -> DerivedState:
        """現在の導出状態"""
        return self._state

    @property
    def image_size(self) -> np.ndarray:
        """画像サイズ (width, height)"""
        return self._image_size.copy()

    @property
    def focal(self) -> np.ndarray:
        """ピクセル単位の焦点距離"""
        return self._state.focal.copy()

    @property
    def center(self) -> np.ndarray:
        """ピクセル単位の主点"""
        return self._state.center.copy()

    @property
    def distortion_enabled(self) -> bool:
        return self._state.distortion.enabled

    @property
    def largest_radius_in_image(self) -> float:
        return self._state.largest_radius

    @property
    def max_radius(self) -> float:
        return self._state.max_radius

    @property
    def one_pixel_dist(self) -> float:
        """画像中心での1ピクセルの正規化ユークリッド距離"""
        return self._state.one_pixel_dist

    @property
    def implane_tl(self) -> np.ndarray:
        return self._state.implane_tl.copy()

    @property
    def implane_br(self) -> np.ndarray:
        return self._state.implane_br.copy()

    @property
    def last_projection(self) -> ProjectionResult | None:
        """直近の投影・逆投影の結果（まだ行っていなければ None）"""
        return self._last

    @property
    def invalid(self) -> bool:
        """直近の点がモデルの有効範囲外だったか"""
        return self._last is not None and self._last.invalid

    def refresh_params(self) -> None:
        """現在のパラメータと画像サイズから導出状態を再計算する"""
        self._state = compute_derived_state(self._params, self._image_size)

    def set_image_size(self, image_size: Sequence[float] | np.ndarray) -> None:
        """画像サイズを変更する

        Args:
            image_size: (width, height) [pixel]、小数も可
        """
        self._image_size = np.array(image_size, dtype=np.float64).reshape(2)
        self.refresh_params()

    def update_params(self, update: Sequence[float] | np.ndarray | CameraParameters) -> None:
        """パラメータに差分ベクトルを加算してストアに書き戻す

        Args:
            update: 5要素の差分ベクトル
        """
        self._store.set(self.name, self._params.updated(update))

    def disable_radial_distortion(self) -> None:
        """歪み角をゼロにして放射歪みとその微分を無効にする"""
        self._store.set(self.name, self._params.without_distortion())

    def _on_parameters_changed(self, params: CameraParameters) -> None:
        self._params = params
        self.refresh_params()

    # ------------------------------------------------------------------
    # 投影
    # ------------------------------------------------------------------

    def project(self, point: Sequence[float] | np.ndarray) -> np.ndarray:
        """正規化ユークリッド座標をピクセル座標に投影する

        Args:
            point: (x, y) = (X/Z, Y/Z)

        Returns:
            ピクセル座標 (u, v)
        """
        self._last = project_point(self._state, point)
        return self._last.image.copy()

    def unproject(self, pixel: Sequence[float] | np.ndarray) -> np.ndarray:
        """ピクセル座標を正規化ユークリッド座標に逆投影する

        Args:
            pixel: (u, v)

        Returns:
            正規化ユークリッド座標 (x, y)
        """
        self._last = unproject_point(self._state, pixel)
        return self._last.cam.copy()

    def ufb_project(self, point: Sequence[float] | np.ndarray) -> np.ndarray:
        """正規化ユークリッド座標を UFB 平面に投影する"""
        self._last = ufb_project_point(self._state, self._params, point)
        return self._last.image.copy()

    def ufb_unproject(self, ufb_point: Sequence[float] | np.ndarray) -> np.ndarray:
        """UFB 平面上の座標を正規化ユークリッド座標に逆投影する"""
        self._last = ufb_unproject_point(self._state, self._params, ufb_point)
        return self._last.cam.copy()

    def ufb_linear_project(self, point: Sequence[float] | np.ndarray) -> np.ndarray:
        """正規化ユークリッド座標を画像の外接矩形基準で単位矩形へ線形に写す（歪みなし）"""
        return np.asarray(point, dtype=np.float64) * self._state.ufb_linear_focal + self._state.ufb_linear_center

    def ufb_linear_unproject(self, ufb_point: Sequence[float] | np.ndarray) -> np.ndarray:
        """ufb_linear_project の逆変換"""
        return (np.asarray(ufb_point, dtype=np.float64) - self._state.ufb_linear_center) * (
            self._state.ufb_linear_inv_focal
        )

    def project_points(self, points: np.ndarray) -> np.ndarray:
        """複数点を投影する（バッチ処理）。直近の結果は更新しない。

        Args:
            points: 正規化ユークリッド座標 (N, 2)

        Returns:
            ピクセル座標 (N, 2)
        """
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            radius = np.hypot(pts[:, 0], pts[:, 1])
            factor = self._state.distortion.factor(radius)
            return self._state.center + self._state.focal * (factor[:, None] * pts)

    def unproject_points(self, pixels: np.ndarray) -> np.ndarray:
        """複数点を逆投影する（バッチ処理）。直近の結果は更新しない。

        Args:
            pixels: ピクセル座標 (N, 2)

        Returns:
            正規化ユークリッド座標 (N, 2)
        """
        pix = np.asarray(pixels, dtype=np.float64).reshape(-1, 2)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            dist_cam = (pix - self._state.center) * self._state.inv_focal
            dist_radius = np.hypot(dist_cam[:, 0], dist_cam[:, 1])
            radius = self._state.distortion.undistort_radius(dist_radius)
            undistort = np.where(dist_radius > RADIUS_EPSILON, radius / dist_radius, 1.0)
            return undistort[:, None] * dist_cam

    # ------------------------------------------------------------------
    # 微分
    # ------------------------------------------------------------------

    def _require_last(self) -> ProjectionResult:
        if self._last is None:
            raise ProjectionStateError(f"ATANCamera '{self.name}': no projection has been performed yet")
        return self._last

    def get_projection_derivs(self) -> np.ndarray:
        """直近の投影点での、ピクセル座標の正規化ユークリッド座標に対する 2x2 ヤコビアン。

        UFB 投影の直後でもピクセル空間の焦点距離で評価される。

        Returns:
            [[du/dx, du/dy], [dv/dx, dv/dy]]

        Raises:
            ProjectionStateError: まだ投影を行っていない場合
        """
        last = self._require_last()
        return jacobian_from_terms(last.cam, last.radius, last.factor, self._state.distortion, self._state.focal)

    def get_camera_parameter_derivs(self) -> np.ndarray:
        """直近の投影点での、ピクセル座標のカメラパラメータに対する 2x5 ヤコビアン。

        カメラの状態（パラメータ、導出状態、直近の結果）は変更しない。

        Raises:
            ProjectionStateError: まだ投影を行っていない場合
        """
        last = self._require_last()
        return camera_parameter_jacobian(self._params, self._image_size, last.cam)

    # ------------------------------------------------------------------
    # 描画
    # ------------------------------------------------------------------

    def make_frustum_matrix(self, near: float, far: float) -> np.ndarray:
        """画像全体を覆う視錐台の 4x4 投影行列を作成する"""
        return make_frustum_matrix(near, far, self._state.implane_tl, self._state.implane_br)
