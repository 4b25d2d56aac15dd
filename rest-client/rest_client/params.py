"""
REST Client - 参数/请求头集合
"""

from typing import Iterator, List, Tuple

from shared.models import NameValue


class NameValueSet:
    """有序的名称/值集合

    - 保持插入顺序
    - 不去重
    - 插入时不校验、不编码（编码在序列化时进行）
    """

    def __init__(self):
        self._items: List[NameValue] = []

    def add(self, name: str, value: str) -> "NameValueSet":
        """追加一个名称/值对"""
        self._items.append(NameValue(name, value))
        return self

    def clear(self):
        """清空集合"""
        self._items.clear()

    def items(self) -> List[Tuple[str, str]]:
        """以 (name, value) 列表形式返回"""
        return [(item.name, item.value) for item in self._items]

    def snapshot(self) -> Tuple[NameValue, ...]:
        """返回当前内容的不可变副本"""
        return tuple(self._items)

    def __iter__(self) -> Iterator[NameValue]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"NameValueSet({self.items()!r})"
