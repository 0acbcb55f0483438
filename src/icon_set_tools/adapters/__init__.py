"""アイコンセット用の入力アダプタ群."""

from .base_adapter import STANDARD_KEYS, BaseAdapter
from .json_adapter import IconSetJSONAdapter

__all__ = [
    "BaseAdapter",
    "IconSetJSONAdapter",
    "STANDARD_KEYS",
]
