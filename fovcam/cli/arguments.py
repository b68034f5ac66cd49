"""Command-line argument parsing."""

from __future__ import annotations

import argparse


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """コマンドライン引数をパースする

    Args:
        argv: 引数リスト（省略時は sys.argv）

    Returns:
        パース済み引数
    """
    parser = argparse.ArgumentParser(description="FOVカメラモデル - ATAN歪みモデルによる投影・逆投影とヤコビアン計算")

    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="設定ファイルのパス（デフォルト: config.yaml）",
    )

    parser.add_argument("--debug", action="store_true", help="デバッグモードで実行（詳細ログ）")

    parser.add_argument("--camera-name", type=str, help="カメラ名（パラメータキー '<名前>.Parameters' に使用）")

    parser.add_argument(
        "--image-size", type=float, nargs=2, metavar=("WIDTH", "HEIGHT"), help="画像サイズ [pixels]（小数も可）"
    )

    parser.add_argument(
        "--project",
        type=float,
        nargs=2,
        action="append",
        default=[],
        metavar=("X", "Y"),
        help="正規化ユークリッド座標をピクセル座標に投影（複数指定可）",
    )

    parser.add_argument(
        "--unproject",
        type=float,
        nargs=2,
        action="append",
        default=[],
        metavar=("U", "V"),
        help="ピクセル座標を正規化ユークリッド座標に逆投影（複数指定可）",
    )

    parser.add_argument("--derivs", action="store_true", help="各点での投影ヤコビアンとパラメータヤコビアンを出力")

    parser.add_argument("--frustum", action="store_true", help="frustum.near / frustum.far の設定で視錐台行列を出力")

    parser.add_argument("--grid-output", type=str, help="歪みグリッド画像の出力パス")

    parser.add_argument("--disable-distortion", action="store_true", help="放射歪みを無効化（歪み角をゼロにする）")

    parser.add_argument("--save-params", action="store_true", help="パラメータを設定ファイルに保存")

    return parser.parse_args(argv)
