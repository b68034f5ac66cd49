#!/usr/bin/env python
"""
FOVカメラモデル - メインエントリーポイント

設定ファイルからカメラパラメータを読み込み、FOV (ATAN) 歪みモデルで
点の投影・逆投影、ヤコビアン、視錐台行列を計算して出力します。
"""

from __future__ import annotations

import logging
from pathlib import Path
import sys

import numpy as np

from fovcam.cli import parse_arguments
from fovcam.config import CameraParameterStore, ConfigManager, apply_env_overrides
from fovcam.projection import ATANCamera
from fovcam.utils import setup_logging
from fovcam.visualization import visualize_distortion_grid


def _apply_cli_overrides(config: ConfigManager, args) -> None:
    """コマンドライン引数で設定を上書きする"""
    if args.debug:
        config.set("output.debug_mode", True)
    if args.camera_name:
        config.set("camera.name", args.camera_name)
    if args.image_size:
        width, height = args.image_size
        config.set("camera.image_width", width)
        config.set("camera.image_height", height)


def _format(values: np.ndarray) -> str:
    return np.array2string(np.asarray(values), precision=6, suppress_small=True)


def run_queries(camera: ATANCamera, args, logger: logging.Logger) -> None:
    """要求された投影・逆投影を実行して結果をログに出力する"""
    for point in args.project:
        pixel = camera.project(point)
        logger.info(f"project {point} -> {_format(pixel)}" + (" (invalid)" if camera.invalid else ""))
        if args.derivs:
            logger.info(f"  projection derivs:\n{_format(camera.get_projection_derivs())}")
            logger.info(f"  camera parameter derivs:\n{_format(camera.get_camera_parameter_derivs())}")

    for pixel in args.unproject:
        point = camera.unproject(pixel)
        logger.info(f"unproject {pixel} -> {_format(point)}" + (" (invalid)" if camera.invalid else ""))
        if args.derivs:
            logger.info(f"  projection derivs:\n{_format(camera.get_projection_derivs())}")
            logger.info(f"  camera parameter derivs:\n{_format(camera.get_camera_parameter_derivs())}")


def main(argv: list[str] | None = None) -> int:
    """メイン処理"""
    # コマンドライン引数のパース
    args = parse_arguments(argv)

    # 初期ロギング設定（設定ファイル読み込み前）
    setup_logging(args.debug, output_dir=None)
    logger = logging.getLogger(__name__)

    logger.info("=" * 80)
    logger.info("FOVカメラモデル 起動")
    logger.info("=" * 80)

    try:
        # 設定ファイルの読み込み
        logger.info(f"設定ファイルを読み込んでいます: {args.config}")
        config = ConfigManager(args.config)
        config.config = apply_env_overrides(config.config)
        _apply_cli_overrides(config, args)

        # 設定の検証
        if not config.validate():
            logger.error("設定ファイルの検証に失敗しました")
            return 1

        # ロギングを再設定（出力ディレクトリを反映）
        output_dir = config.get("output.directory", "output")
        setup_logging(config.get("output.debug_mode", False), output_dir)
        logger = logging.getLogger(__name__)

        store = CameraParameterStore(config)
        camera = ATANCamera(
            config.get("camera.name"),
            (config.get("camera.image_width"), config.get("camera.image_height")),
            store,
        )

        if args.disable_distortion:
            camera.disable_radial_distortion()
            logger.info("放射歪みを無効化しました")

        logger.info(f"focal={_format(camera.focal)}, center={_format(camera.center)}")
        logger.info(f"max_radius={camera.max_radius:.6f}, one_pixel_dist={camera.one_pixel_dist:.6g}")

        run_queries(camera, args, logger)

        if args.frustum:
            matrix = camera.make_frustum_matrix(config.get("frustum.near"), config.get("frustum.far"))
            logger.info(f"frustum matrix:\n{_format(matrix)}")

        if args.grid_output:
            Path(args.grid_output).parent.mkdir(parents=True, exist_ok=True)
            visualize_distortion_grid(camera, output_path=args.grid_output)

        if args.save_params:
            store.save()

        logger.info("=" * 80)
        logger.info("処理が完了しました")
        logger.info("=" * 80)
        return 0

    except FileNotFoundError as e:
        logger.error(f"ファイルが見つかりません: {e}")
        return 1
    except ValueError as e:
        logger.error(f"設定エラー: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("処理が中断されました")
        return 130
    except Exception as e:
        logger.error(f"予期しないエラーが発生しました: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
