from typing import Any, Dict, List


class Documentation:
    """Mutable record the handlers fill in for one component definition."""

    def __init__(self):
        self._data: Dict[str, Any] = {}
        self._props: Dict[str, Dict[str, Any]] = {}
        self._composes: List[str] = []

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_prop_descriptor(self, name: str) -> Dict[str, Any]:
        return self._props.setdefault(name, {})

    def add_composes(self, module: str) -> None:
        if module not in self._composes:
            self._composes.append(module)

    def to_object(self) -> Dict[str, Any]:
        obj = dict(self._data)
        if self._props:
            obj["props"] = {name: dict(descriptor) for name, descriptor in self._props.items()}
        if self._composes:
            obj["composes"] = list(self._composes)
        return obj
