"""Unit tests for ConfigManager."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
import yaml

from fovcam.config import ConfigManager

if TYPE_CHECKING:
    from pathlib import Path


def test_init_with_default_config():
    """存在しない設定ファイルパスで初期化するとデフォルト設定が使用される。"""

    config = ConfigManager("nonexistent_config.yaml")
    assert config.get("camera.name") == "Camera"
    assert config.get("Camera.Parameters") == [0.5, 0.8, 0.5, 0.5, 0.07]


def test_init_without_path():
    """パスなしではメモリ上のデフォルト設定を使う。"""

    config = ConfigManager(None)
    assert config.config_path is None
    assert config.get("frustum.near") == 0.1


def test_defaults_are_not_shared():
    """インスタンス間でデフォルト設定が共有されない。"""

    first = ConfigManager(None)
    second = ConfigManager(None)
    first.set("camera.image_width", 1024)

    assert second.get("camera.image_width") == 640
    assert ConfigManager.DEFAULT_CONFIG["camera"]["image_width"] == 640


def test_load_yaml_config(tmp_path: Path):
    """YAML設定ファイルを正しく読み込め、デフォルトにマージされる。"""

    yaml_content = """
camera:
  name: "Front"
  image_width: 1280
Front:
  Parameters: [0.6, 0.9, 0.5, 0.5, 0.9]
"""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text(yaml_content, encoding="utf-8")

    config = ConfigManager(str(config_path))
    assert config.get("camera.name") == "Front"
    assert config.get("camera.image_width") == 1280
    assert config.get("camera.image_height") == 480
    assert config.get("Front.Parameters") == [0.6, 0.9, 0.5, 0.5, 0.9]


def test_load_json_config(tmp_path: Path):
    """JSON設定ファイルを正しく読み込める。"""

    config_path = tmp_path / "test_config.json"
    config_path.write_text(json.dumps({"frustum": {"near": 0.5, "far": 50.0}}), encoding="utf-8")

    config = ConfigManager(str(config_path))
    assert config.get("frustum.near") == 0.5
    assert config.get("frustum.far") == 50.0


def test_empty_config_uses_defaults(tmp_path: Path):
    """空の設定ファイルではデフォルト設定を使う。"""

    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")

    config = ConfigManager(str(config_path))
    assert config.get("camera.image_width") == 640


def test_invalid_yaml_raises(tmp_path: Path):
    """YAMLの構文エラーは ValueError になる。"""

    config_path = tmp_path / "broken.yaml"
    config_path.write_text("camera: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="YAML解析エラー"):
        ConfigManager(str(config_path))


def test_invalid_json_raises(tmp_path: Path):
    """JSONの構文エラーは ValueError になる。"""

    config_path = tmp_path / "broken.json"
    config_path.write_text("{invalid", encoding="utf-8")

    with pytest.raises(ValueError, match="JSON解析エラー"):
        ConfigManager(str(config_path))


class TestValidate:
    """validateのテスト"""

    def test_default_is_valid(self):
        """デフォルト設定は妥当"""
        assert ConfigManager(None).validate() is True

    def test_missing_section(self):
        """必須セクションがない"""
        config = ConfigManager(None)
        del config.config["frustum"]

        with pytest.raises(ValueError, match="frustum"):
            config.validate()

    def test_missing_key(self):
        """必須項目がない"""
        config = ConfigManager(None)
        del config.config["camera"]["image_height"]

        with pytest.raises(ValueError, match="camera.image_height"):
            config.validate()

    @pytest.mark.parametrize("value", [0, -640, "640", True])
    def test_invalid_image_width(self, value):
        """画像幅は正の数値"""
        config = ConfigManager(None)
        config.set("camera.image_width", value)

        with pytest.raises(ValueError, match="image_width"):
            config.validate()

    def test_fractional_image_size_is_valid(self):
        """小数の画像サイズは許可される"""
        config = ConfigManager(None)
        config.set("camera.image_width", 640.5)

        assert config.validate() is True

    def test_empty_camera_name(self):
        """カメラ名は空でない文字列"""
        config = ConfigManager(None)
        config.set("camera.name", "")

        with pytest.raises(ValueError, match="camera.name"):
            config.validate()

    def test_dotted_camera_name(self):
        """カメラ名に '.' は使えない"""
        config = ConfigManager(None)
        config.set("camera.name", "cam.left")

        with pytest.raises(ValueError, match="camera.name"):
            config.validate()

    def test_parameters_wrong_length(self):
        """パラメータは5要素"""
        config = ConfigManager(None)
        config.set("Camera.Parameters", [0.5, 0.8, 0.5])

        with pytest.raises(ValueError, match="Camera.Parameters"):
            config.validate()

    def test_parameters_not_numeric(self):
        """パラメータは数値"""
        config = ConfigManager(None)
        config.set("Side.Parameters", [0.5, 0.8, "x", 0.5, 0.0])

        with pytest.raises(ValueError, match=r"Side.Parameters\[2\]"):
            config.validate()

    def test_near_must_be_less_than_far(self):
        """near < far"""
        config = ConfigManager(None)
        config.set("frustum.near", 10.0)
        config.set("frustum.far", 1.0)

        with pytest.raises(ValueError, match="frustum.far"):
            config.validate()

    def test_near_must_be_positive(self):
        """near > 0"""
        config = ConfigManager(None)
        config.set("frustum.near", 0.0)

        with pytest.raises(ValueError, match="frustum.near"):
            config.validate()

    def test_debug_mode_must_be_bool(self):
        """debug_mode はブール値"""
        config = ConfigManager(None)
        config.set("output.debug_mode", "yes")

        with pytest.raises(ValueError, match="debug_mode"):
            config.validate()


def test_get_with_default():
    """存在しないキーはデフォルト値を返す。"""

    config = ConfigManager(None)
    assert config.get("camera.missing", 42) == 42
    assert config.get("camera.name.deeper") is None


def test_set_creates_nested_keys():
    """ドット記法で階層を作成できる。"""

    config = ConfigManager(None)
    config.set("Rear.Parameters", [0.4, 0.6, 0.5, 0.5, 0.0])

    assert config.get_section("Rear") == {"Parameters": [0.4, 0.6, 0.5, 0.5, 0.0]}


def test_save_and_reload_yaml(tmp_path: Path):
    """YAML形式で保存して再読み込みできる。"""

    config_path = tmp_path / "saved" / "config.yaml"
    config = ConfigManager(None)
    config.set("Camera.Parameters", [0.6, 0.9, 0.5, 0.5, 0.0])
    config.save(str(config_path))

    saved = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    assert saved["Camera"]["Parameters"] == [0.6, 0.9, 0.5, 0.5, 0.0]

    reloaded = ConfigManager(str(config_path))
    assert reloaded.get("Camera.Parameters") == [0.6, 0.9, 0.5, 0.5, 0.0]


def test_save_json(tmp_path: Path):
    """JSON形式で保存できる。"""

    config_path = tmp_path / "config.json"
    ConfigManager(None).save(str(config_path))

    saved = json.loads(config_path.read_text(encoding="utf-8"))
    assert saved["camera"]["name"] == "Camera"


def test_save_without_path_raises():
    """保存先が決まらない場合はエラー。"""

    with pytest.raises(ValueError, match="保存先"):
        ConfigManager(None).save()


def test_save_unsupported_format_raises(tmp_path: Path):
    """サポートされない拡張子はエラー。"""

    with pytest.raises(ValueError, match="サポートされない"):
        ConfigManager(None).save(str(tmp_path / "config.txt"))


def test_reload_picks_up_changes(tmp_path: Path):
    """reloadでファイルの変更が反映される。"""

    config_path = tmp_path / "config.yaml"
    config_path.write_text("frustum:\n  near: 0.2\n", encoding="utf-8")
    config = ConfigManager(str(config_path))

    config_path.write_text("frustum:\n  near: 0.3\n", encoding="utf-8")
    config.reload()

    assert config.get("frustum.near") == 0.3
