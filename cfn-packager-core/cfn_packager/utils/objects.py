from typing import Any, Callable, Dict, List, Union

ComplexType = Union[List, Dict, Any]


def recurse_object(obj: ComplexType, func: Callable, path: str = "") -> ComplexType:
    """Recursively apply `func` to `obj` (might be a list, dict, or other object)."""
    obj = func(obj, path=path)
    if isinstance(obj, list):
        for i in range(len(obj)):
            tmp_path = f"{path or '.'}[{i}]"
            obj[i] = recurse_object(obj[i], func, tmp_path)
    elif isinstance(obj, dict):
        for k, v in obj.items():
            tmp_path = f"{f'{path}.' if path else ''}{k}"
            obj[k] = recurse_object(v, func, tmp_path)
    return obj


def get_value_at_path(obj: Dict, path: str, default=None) -> Any:
    """Return the value at the given dotted `path` (e.g., `Command.ScriptLocation`) of a nested dict."""
    current = obj
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def set_value_at_path(obj: Dict, path: str, value: Any) -> None:
    """Set the value at the given dotted `path` of a nested dict, creating intermediate dicts as needed."""
    parts = path.split(".")
    current = obj
    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[parts[-1]] = value
