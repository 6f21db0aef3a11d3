"""アーキテクチャタイプ定義の読み込み。"""

from pathlib import Path

import yaml

from omitt.models.architecture import ArchitectureTypeInfo
from omitt.models.errors import StorageError

ARCHITECTURE_TYPES_FILE = "architecture-types.yaml"


def load_architecture_types(config_dir: Path) -> list[ArchitectureTypeInfo]:
    """アーキテクチャタイプ定義をYAMLファイルから読み込む。

    Raises:
        StorageError: 定義ファイルが存在しない場合。
    """
    types_file = config_dir / ARCHITECTURE_TYPES_FILE
    try:
        with open(types_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise StorageError(f"アーキテクチャタイプ定義ファイルが見つかりません: {types_file}") from None
    return [ArchitectureTypeInfo.model_validate(t) for t in data["architecture_types"]]


def type_descriptions(types: list[ArchitectureTypeInfo]) -> dict[str, str]:
    """タイプID → 説明文の対応表を返す。"""
    return {t.id: t.description for t in types}
