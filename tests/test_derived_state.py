"""Test cases for derived camera state computation."""

from __future__ import annotations

import numpy as np
import pytest

from fovcam.models import CameraParameters
from fovcam.projection.derived_state import MAX_RADIUS_SCALE, compute_derived_state


class TestComputeDerivedState:
    """compute_derived_stateのテスト"""

    def test_focal_and_center(self):
        """ピクセル空間の焦点距離と主点"""
        state = compute_derived_state(CameraParameters(), (640, 480))

        np.testing.assert_allclose(state.focal, [320.0, 384.0])
        np.testing.assert_allclose(state.center, [319.5, 239.5])
        np.testing.assert_allclose(state.inv_focal, [1.0 / 320.0, 1.0 / 384.0])

    def test_fractional_image_size(self):
        """小数の画像サイズも扱える"""
        state = compute_derived_state(CameraParameters(), (320.5, 240.25))

        np.testing.assert_allclose(state.focal, [160.25, 192.2])
        np.testing.assert_allclose(state.center, [159.75, 119.625])

    def test_pinhole_largest_radius(self):
        """歪みなしでは最も遠い隅までの半径そのもの"""
        state = compute_derived_state(CameraParameters(w=0.0), (640, 480))

        assert state.largest_radius == pytest.approx(np.hypot(1.0, 0.625))
        assert state.max_radius == pytest.approx(MAX_RADIUS_SCALE * np.hypot(1.0, 0.625))

    def test_distorted_largest_radius(self):
        """歪みありでは最も遠い隅の半径を逆変換した値"""
        w = 0.07
        state = compute_derived_state(CameraParameters(w=w), (640, 480))

        rd = np.hypot(1.0, 0.625)
        expected = np.tan(rd * w) / (2.0 * np.tan(w / 2.0))
        assert state.largest_radius == pytest.approx(expected)
        assert state.max_radius == pytest.approx(1.5 * expected)

    def test_off_center_principal_point(self):
        """主点が中心からずれている場合は遠い側の隅を使う"""
        state = compute_derived_state(CameraParameters(0.5, 0.8, 0.3, 0.6, 0.0), (640, 480))

        assert state.largest_radius == pytest.approx(np.hypot(0.7 / 0.5, 0.6 / 0.8))

    def test_pinhole_one_pixel_dist(self):
        """歪みなしでは1ピクセルの距離は焦点距離の逆数で決まる"""
        state = compute_derived_state(CameraParameters(w=0.0), (640, 480))

        expected = np.hypot(1.0 / 320.0, 1.0 / 384.0) / np.sqrt(2.0)
        assert state.one_pixel_dist == pytest.approx(expected)

    def test_pinhole_image_plane_bounds(self):
        """歪みなしでは外接矩形は画像の隅の線形逆投影"""
        state = compute_derived_state(CameraParameters(w=0.0), (640, 480))

        np.testing.assert_allclose(state.implane_tl, [-320.0 / 320.0, -240.0 / 384.0])
        np.testing.assert_allclose(state.implane_br, [320.0 / 320.0, 240.0 / 384.0])

    def test_ufb_linear_maps_bounds_to_unit_square(self):
        """UFB 線形写像は外接矩形を単位矩形に写す"""
        state = compute_derived_state(CameraParameters(), (640, 480))

        tl = state.implane_tl * state.ufb_linear_focal + state.ufb_linear_center
        br = state.implane_br * state.ufb_linear_focal + state.ufb_linear_center

        np.testing.assert_allclose(tl, [0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(br, [1.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(state.ufb_linear_inv_focal, state.implane_br - state.implane_tl)

    def test_distortion_widens_image_plane(self):
        """樽型歪みの補正で外接矩形は広がる"""
        pinhole = compute_derived_state(CameraParameters(w=0.0), (640, 480))
        distorted = compute_derived_state(CameraParameters(w=0.5), (640, 480))

        assert np.all(distorted.implane_br > pinhole.implane_br)
        assert np.all(distorted.implane_tl < pinhole.implane_tl)

    def test_state_is_immutable(self):
        """導出状態は不変"""
        state = compute_derived_state(CameraParameters(), (640, 480))

        with pytest.raises(AttributeError):
            state.max_radius = 1.0

    def test_degenerate_focal_does_not_raise(self):
        """焦点距離ゼロでも例外は発生せず非有限値が伝播する"""
        state = compute_derived_state(CameraParameters(0.0, 0.8, 0.5, 0.5, 0.07), (640, 480))

        assert not np.isfinite(state.inv_focal[0])
        assert not np.isfinite(state.largest_radius)
