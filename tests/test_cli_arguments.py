"""Test cases for CLI arguments."""

from __future__ import annotations

import sys
from unittest.mock import patch

from fovcam.cli.arguments import parse_arguments


def test_parse_arguments_default():
    """デフォルト引数のパース"""
    test_args = ["script_name"]

    with patch.object(sys, "argv", test_args):
        args = parse_arguments()

        assert args.config == "config.yaml"
        assert args.debug is False
        assert args.camera_name is None
        assert args.image_size is None
        assert args.project == []
        assert args.unproject == []
        assert args.derivs is False
        assert args.frustum is False
        assert args.grid_output is None
        assert args.disable_distortion is False
        assert args.save_params is False


def test_parse_arguments_config():
    """設定ファイルパスの指定"""
    test_args = ["script_name", "--config", "custom_config.yaml"]

    with patch.object(sys, "argv", test_args):
        args = parse_arguments()

        assert args.config == "custom_config.yaml"


def test_parse_arguments_debug():
    """デバッグモードの指定"""
    args = parse_arguments(["--debug"])

    assert args.debug is True


def test_parse_arguments_image_size():
    """画像サイズの指定（小数も可）"""
    args = parse_arguments(["--image-size", "640.5", "480"])

    assert args.image_size == [640.5, 480.0]


def test_parse_arguments_points():
    """投影・逆投影する点を複数指定できる"""
    args = parse_arguments(["--project", "0", "0", "--project", "0.5", "-0.25", "--unproject", "100", "200"])

    assert args.project == [[0.0, 0.0], [0.5, -0.25]]
    assert args.unproject == [[100.0, 200.0]]


def test_parse_arguments_actions():
    """各種フラグの指定"""
    args = parse_arguments(
        [
            "--camera-name",
            "Front",
            "--derivs",
            "--frustum",
            "--grid-output",
            "grid.png",
            "--disable-distortion",
            "--save-params",
        ]
    )

    assert args.camera_name == "Front"
    assert args.derivs is True
    assert args.frustum is True
    assert args.grid_output == "grid.png"
    assert args.disable_distortion is True
    assert args.save_params is True
