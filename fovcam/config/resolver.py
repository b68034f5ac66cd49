"""CLI/環境変数の上書きを行う簡易リゾルバ。"""

from __future__ import annotations

import copy
import os
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from collections.abc import Mapping

ENV_PREFIX = "FOVCAM_"

# 環境変数名で階層を区切る文字列（例: FOVCAM_CAMERA__IMAGE_WIDTH）
ENV_NESTING_SEPARATOR = "__"


def merge_overrides(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """辞書を再帰的にマージする。overrides 側の値が優先される。"""
    merged = copy.deepcopy(dict(base))
    for k, v in overrides.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = merge_overrides(merged[k], v)
        else:
            merged[k] = copy.deepcopy(v)
    return merged


def apply_env_overrides(
    config: Mapping[str, Any],
    prefix: str = ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """環境変数による上書き。

    キーは小文字化し、"__" で階層を区切る。値は YAML スカラーとして解釈する。
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    for env_key, env_val in env.items():
        if not env_key.startswith(prefix):
            continue
        path = env_key[len(prefix) :].lower().split(ENV_NESTING_SEPARATOR)
        node = overrides
        for k in path[:-1]:
            if not isinstance(node.get(k), dict):
                node[k] = {}
            node = node[k]
        node[path[-1]] = yaml.safe_load(env_val)
    return merge_overrides(config, overrides)
