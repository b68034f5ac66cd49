"""カメラパラメータの永続化ストア。

カメラ名に ".Parameters" を付けたキーで ConfigManager にパラメータベクトルを保持し、
値が変更されたときに購読者へ通知する。
"""

from __future__ import annotations

from collections.abc import Callable
import inspect
import logging
import weakref

from fovcam.config.config_manager import PARAMETERS_SUFFIX, ConfigManager
from fovcam.models.camera_params import CameraParameters

logger = logging.getLogger(__name__)

ParametersCallback = Callable[[CameraParameters], None]


class CameraParameterStore:
    """カメラパラメータのキーバリューストア

    Attributes:
        config: 保存先の ConfigManager
        default_params: 値が存在しない場合に登録されるデフォルトパラメータ
    """

    def __init__(
        self,
        config: ConfigManager | None = None,
        default_params: CameraParameters | None = None,
    ):
        """初期化

        Args:
            config: 保存先（省略時はメモリ上のデフォルト設定）
            default_params: デフォルトパラメータ
        """
        self.config = config if config is not None else ConfigManager(None)
        self.default_params = default_params if default_params is not None else CameraParameters()
        self._subscribers: dict[str, list[Callable[[], ParametersCallback | None]]] = {}

    @staticmethod
    def key_for(name: str) -> str:
        """カメラ名に対応する設定キーを返す

        Raises:
            ValueError: カメラ名が空、または "." を含む場合
        """
        if not name or "." in name:
            raise ValueError(f"カメラ名は空でなく '.' を含まない文字列である必要があります: '{name}'")
        return f"{name}.{PARAMETERS_SUFFIX}"

    def get(self, name: str) -> CameraParameters:
        """カメラのパラメータを取得する。

        値が存在しない場合はデフォルト値を登録して返す。

        Args:
            name: カメラ名

        Returns:
            CameraParameters
        """
        key = self.key_for(name)
        value = self.config.get(key)
        if value is None:
            logger.info(f"'{key}' が未定義のためデフォルト値を使用します: {self.default_params.to_list()}")
            self.config.set(key, self.default_params.to_list())
            return CameraParameters.from_array(self.default_params.to_list())
        return CameraParameters.from_array(value)

    def set(self, name: str, params: CameraParameters) -> None:
        """カメラのパラメータを上書きし、購読者に通知する。

        Args:
            name: カメラ名
            params: 新しいパラメータ
        """
        self.config.set(self.key_for(name), params.to_list())
        self._notify(name, params)

    def subscribe(self, name: str, callback: ParametersCallback) -> None:
        """パラメータ変更通知を購読する。

        バウンドメソッドは弱参照で保持するため、購読者の寿命を延ばさない。

        Args:
            name: カメラ名
            callback: 新しいパラメータを受け取る関数
        """
        if inspect.ismethod(callback):
            ref: Callable[[], ParametersCallback | None] = weakref.WeakMethod(callback)
        else:

            def ref() -> ParametersCallback:
                return callback

        self._subscribers.setdefault(name, []).append(ref)

    def unsubscribe(self, name: str, callback: ParametersCallback) -> None:
        """購読を解除する"""
        self._subscribers[name] = [ref for ref in self._subscribers.get(name, []) if ref() not in (None, callback)]

    def reload(self) -> None:
        """設定を再読み込みし、値が変わったカメラの購読者に通知する"""
        before = {name: self.config.get(self.key_for(name)) for name in self._subscribers}
        self.config.reload()
        for name, old_value in before.items():
            new_value = self.config.get(self.key_for(name))
            if new_value is not None and new_value != old_value:
                logger.info(f"'{self.key_for(name)}' が外部で変更されました: {new_value}")
                self._notify(name, CameraParameters.from_array(new_value))

    def save(self, output_path: str | None = None) -> None:
        """パラメータを含む設定をファイルに保存する"""
        self.config.save(output_path)

    def _notify(self, name: str, params: CameraParameters) -> None:
        if name not in self._subscribers:
            return
        # コールバック内で追加された購読は次回の通知から対象になる
        for ref in list(self._subscribers[name]):
            callback = ref()
            if callback is not None:
                callback(params)
        self._subscribers[name] = [ref for ref in self._subscribers[name] if ref() is not None]
