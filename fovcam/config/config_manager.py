"""Configuration management module for the FOV camera model."""

from __future__ import annotations

import copy
import json
import logging
import os
from typing import Any

import yaml

from fovcam.config.loader import dump_config_file, load_config_file
from fovcam.config.resolver import merge_overrides
from fovcam.models.camera_params import NUM_CAMERA_PARAMETERS

logger = logging.getLogger(__name__)

# カメラパラメータを保持するキーの接尾辞（"<カメラ名>.Parameters"）
PARAMETERS_SUFFIX = "Parameters"


class ConfigManager:
    """設定ファイル管理クラス

    YAML/JSON形式の設定ファイルを読み込み、検証し、設定値を提供する。
    ファイルの内容はデフォルト設定の上に再帰的にマージされる。

    Attributes:
        config_path: 設定ファイルのパス（None の場合はメモリ上のみ）
        config: 読み込まれた設定データ
    """

    # 必須項目の定義
    REQUIRED_KEYS = {
        "camera": ["name", "image_width", "image_height"],
        "frustum": ["near", "far"],
        "output": ["directory"],
    }

    # デフォルト設定値
    DEFAULT_CONFIG = {
        "camera": {
            "name": "Camera",
            "image_width": 640,
            "image_height": 480,
        },
        "frustum": {
            "near": 0.1,
            "far": 100.0,
        },
        "output": {
            "directory": "output",
            "debug_mode": False,
        },
        "Camera": {
            PARAMETERS_SUFFIX: [0.5, 0.8, 0.5, 0.5, 0.07],
        },
    }

    def __init__(self, config_path: str | None = "config.yaml"):
        """ConfigManagerを初期化する

        Args:
            config_path: 設定ファイルのパス（デフォルト: config.yaml、None でファイルなし）
        """
        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """設定ファイルを読み込む

        Returns:
            読み込まれた設定データ

        Raises:
            ValueError: 設定ファイルの形式が不正な場合
        """
        if self.config_path is None:
            logger.debug("設定ファイルが指定されていません。デフォルト設定を使用します。")
            return copy.deepcopy(self.DEFAULT_CONFIG)

        if not os.path.exists(self.config_path):
            logger.warning(f"設定ファイル '{self.config_path}' が見つかりません。デフォルト設定を使用します。")
            return copy.deepcopy(self.DEFAULT_CONFIG)

        try:
            config = load_config_file(self.config_path)
        except yaml.YAMLError as e:
            raise ValueError(f"YAML解析エラー: {e}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"JSON解析エラー: {e}") from e

        if not config:
            logger.warning("設定ファイルが空です。デフォルト設定を使用します。")
            return copy.deepcopy(self.DEFAULT_CONFIG)

        logger.info(f"設定ファイル '{self.config_path}' を読み込みました。")
        return merge_overrides(self.DEFAULT_CONFIG, config)

    def reload(self) -> None:
        """設定ファイルを再読み込みする"""
        self.config = self._load_config()

    def validate(self) -> bool:
        """設定値の妥当性を検証する

        必須項目の存在チェック、型チェック、値の範囲チェックを実行する。

        Returns:
            検証が成功した場合True

        Raises:
            ValueError: 設定値が不正な場合
        """
        # 必須セクションの存在チェック
        for section in self.REQUIRED_KEYS.keys():
            if section not in self.config:
                raise ValueError(f"必須セクション '{section}' が設定ファイルに存在しません。")

        # 各セクションの必須項目チェック
        for section, required_keys in self.REQUIRED_KEYS.items():
            section_config = self.config.get(section, {})
            if not isinstance(section_config, dict):
                raise ValueError(f"セクション '{section}' は辞書型である必要があります。")
            for key in required_keys:
                if key not in section_config:
                    raise ValueError(f"必須項目 '{section}.{key}' が設定ファイルに存在しません。")

        self._validate_camera_config()
        self._validate_parameters_config()
        self._validate_frustum_config()
        self._validate_output_config()

        logger.info("設定ファイルの検証が完了しました。")
        return True

    def _validate_camera_config(self):
        """camera セクションの検証"""
        camera_config = self.config.get("camera", {})

        if not isinstance(camera_config.get("name"), str) or not camera_config["name"]:
            raise ValueError("camera.name は空でない文字列である必要があります。")
        if "." in camera_config["name"]:
            raise ValueError("camera.name に '.' は使用できません。")

        # 画像サイズは小数も許可する
        for key in ("image_width", "image_height"):
            value = camera_config.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"camera.{key} は正の数値である必要があります。")

    def _validate_parameters_config(self):
        """"<カメラ名>.Parameters" 形式のパラメータベクトルの検証"""
        for section, section_config in self.config.items():
            if not isinstance(section_config, dict) or PARAMETERS_SUFFIX not in section_config:
                continue

            params = section_config[PARAMETERS_SUFFIX]
            if not isinstance(params, list) or len(params) != NUM_CAMERA_PARAMETERS:
                raise ValueError(
                    f"{section}.{PARAMETERS_SUFFIX} は {NUM_CAMERA_PARAMETERS} 要素のリストである必要があります。"
                )
            for i, value in enumerate(params):
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"{section}.{PARAMETERS_SUFFIX}[{i}] は数値である必要があります。")

    def _validate_frustum_config(self):
        """frustum セクションの検証"""
        frustum_config = self.config.get("frustum", {})

        near = frustum_config.get("near")
        far = frustum_config.get("far")
        if not isinstance(near, (int, float)) or near <= 0:
            raise ValueError("frustum.near は正の数値である必要があります。")
        if not isinstance(far, (int, float)) or far <= near:
            raise ValueError("frustum.far は frustum.near より大きい数値である必要があります。")

    def _validate_output_config(self):
        """output セクションの検証"""
        output_config = self.config.get("output", {})

        if not isinstance(output_config.get("directory"), str):
            raise ValueError("output.directory は文字列である必要があります。")

        if "debug_mode" in output_config and not isinstance(output_config["debug_mode"], bool):
            raise ValueError("output.debug_mode はブール値である必要があります。")

    def get(self, key: str, default: Any = None) -> Any:
        """設定値を取得する

        ドット記法（例: 'camera.image_width'）で階層的な設定値にアクセスできる。

        Args:
            key: 設定キー（ドット記法をサポート）
            default: キーが存在しない場合のデフォルト値

        Returns:
            設定値、またはデフォルト値
        """
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_section(self, section: str) -> dict[str, Any]:
        """設定セクション全体を取得する

        Args:
            section: セクション名（例: 'camera', 'frustum'）

        Returns:
            セクションの設定データ
        """
        return self.config.get(section, {})

    def set(self, key: str, value: Any):
        """設定値を動的に変更する

        Args:
            key: 設定キー（ドット記法をサポート）
            value: 設定する値
        """
        keys = key.split(".")
        config = self.config

        for k in keys[:-1]:
            if not isinstance(config.get(k), dict):
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        logger.debug(f"設定値を変更しました: {key} = {value}")

    def save(self, output_path: str | None = None):
        """設定をファイルに保存する

        Args:
            output_path: 保存先パス（指定しない場合は元のパスに上書き）

        Raises:
            ValueError: 保存先が決まらない場合、またはサポートされていない形式の場合
        """
        save_path = output_path or self.config_path
        if save_path is None:
            raise ValueError("保存先のパスが指定されていません。")

        try:
            dump_config_file(self.config, save_path)
            logger.info(f"設定ファイルを保存しました: {save_path}")
        except OSError as e:
            logger.error(f"設定ファイルの保存に失敗しました: {e}")
            raise
