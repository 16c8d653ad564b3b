from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import json5  # type: ignore
import yaml

from .models import INCLUDE_KEY, VAR_PATTERN, Settings


VARIABLES_KEY = "variables"

_MISSING = object()


def _read_document(path: Path) -> Any:
    """Parse a YAML or JSON5 file; an empty document reads as {}."""
    ext = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if ext in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    elif ext in (".json", ".json5", ".jsonc"):
        data = json5.loads(text)
    else:
        raise ValueError(f"Unsupported config file extension: {ext}")
    return {} if data is None else data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def _split_variables(doc: Dict[str, Any]) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Separate the `variables` section from the rest of a document. The section
    may be a mapping or a list of single-key mappings.
    """
    raw = doc.get(VARIABLES_KEY)
    entries: List[Dict[str, Any]] = []
    if isinstance(raw, dict):
        entries = [raw]
    elif isinstance(raw, list):
        entries = [e for e in raw if isinstance(e, dict)]
    variables = {k: v for entry in entries for k, v in entry.items() if isinstance(k, str)}
    rest = {k: v for k, v in doc.items() if k != VARIABLES_KEY}
    return variables, rest


def _glob_includes(base_dir: Path, pattern: Any) -> List[Path]:
    if not isinstance(pattern, str):
        raise TypeError("include path must be a string")
    normalized = pattern.replace("\\", "/")
    if os.path.isabs(pattern) or ".." in normalized.split("/"):
        raise ValueError(f"Include pattern must be relative and stay below its file: '{pattern}'")

    anchor = base_dir.resolve()
    found: List[Path] = []
    for candidate in sorted(base_dir.glob(normalized)):
        real = candidate.resolve()
        if candidate.is_file() and real.is_relative_to(anchor):
            found.append(real)
    if not found:
        raise ValueError(f"Include pattern '{pattern}' under '{base_dir}' did not match any files")
    return found


class _ConfigReader:
    """
    Reads a config file, expanding `$include` keys and collecting variables.

    Included mappings are merged first and the including node's own keys on
    top. Variables from the including file win over included ones.
    """

    def __init__(self) -> None:
        self.variables: Dict[str, Any] = {}
        self._stack: Set[Path] = set()

    def read(self, path: Path) -> Dict[str, Any]:
        if path in self._stack:
            raise ValueError(f"Detected include cycle at {path}")
        self._stack.add(path)
        try:
            doc = _read_document(path)
            if not isinstance(doc, dict):
                raise ValueError(f"Config file must contain a mapping: {path}")
            own_vars, body = _split_variables(doc)
            expanded = self._expand(body, path.parent)
            self.variables.update(own_vars)
            return expanded
        finally:
            self._stack.discard(path)

    def _expand(self, node: Any, base_dir: Path) -> Any:
        if isinstance(node, list):
            return [self._expand(item, base_dir) for item in node]
        if not isinstance(node, dict):
            return node

        included: Dict[str, Any] = {}
        if INCLUDE_KEY in node:
            spec = node[INCLUDE_KEY]
            for pattern in spec if isinstance(spec, list) else [spec]:
                for inc_path in _glob_includes(base_dir, pattern):
                    included = _merge(included, self.read(inc_path))

        own = {
            key: self._expand(value, base_dir)
            for key, value in node.items()
            if key != INCLUDE_KEY
        }
        return _merge(included, own)


class _Variables:
    """Variable table with `${NAME}` and `${env:NAME}` lookups."""

    def __init__(self, raw: Dict[str, Any]):
        self._raw = raw
        self._resolved: Dict[str, Any] = {}
        self._pending: Set[str] = set()
        for name in raw:
            self._resolve(name)

    def lookup(self, ref: str) -> Any:
        if ref.startswith("env:"):
            env_name = ref[len("env:"):]
            value = os.getenv(env_name) if env_name else None
            return _MISSING if value is None else value
        return self._resolved.get(ref, _MISSING)

    def _resolve(self, name: str) -> Any:
        if name in self._resolved:
            return self._resolved[name]
        if name in self._pending:
            raise ValueError(f"Detected variable resolution cycle at '{name}'")
        self._pending.add(name)
        value = self._raw[name]
        # Only whole-value references are chained; embedded ones are left as text.
        m = VAR_PATTERN.fullmatch(value) if isinstance(value, str) else None
        if m is not None:
            ref = m.group(1)
            if ref.startswith("env:"):
                env_value = self.lookup(ref)
                if env_value is not _MISSING:
                    value = env_value
            elif ref in self._raw:
                value = self._resolve(ref)
        self._pending.discard(name)
        self._resolved[name] = value
        return value

    def _render(self, m: "re.Match[str]") -> str:
        value = self.lookup(m.group(1))
        if value is _MISSING:
            return m.group(0)
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False)
        return str(value)

    def substitute(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: self.substitute(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [self.substitute(v) for v in obj]
        if not isinstance(obj, str):
            return obj
        whole = VAR_PATTERN.fullmatch(obj)
        if whole is not None:
            # A bare reference keeps the variable's type.
            value = self.lookup(whole.group(1))
            return obj if value is _MISSING else value
        return VAR_PATTERN.sub(self._render, obj).replace("$${", "${")


def load_settings(path: Union[str, Path], overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Load Settings from a YAML or JSON5 file.

    `overrides` is merged over the file contents before validation, after
    variables are substituted.
    """
    reader = _ConfigReader()
    data = reader.read(Path(path).resolve())
    data = _Variables(reader.variables).substitute(data)
    if overrides:
        data = _merge(data, overrides)
    return Settings.model_validate(data)
