"""Script and key file text: generation for dumps, parsing for uninstall and listing."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

_MAIN_APP = re.compile(r"^\s*addappid\((\d+)\)[^\n]*?(?:--\s*(.+?))?\s*$", re.MULTILINE)
_SET_MANIFEST = re.compile(r'setManifestid\(\s*(\d+)\s*,\s*"?(\d+)"?', re.IGNORECASE)
_NAME_COMMENT = re.compile(r"^--\s*Name:\s*(.+?)\s*$", re.MULTILINE)
_NAME_FIELD = re.compile(r'name\s*=\s*"([^"]+)"')


def build_script(app_id: int, depot_id: int, key_hex: str, manifest_id: str) -> str:
    """Declare the app, the depot with its key, and the depot's manifest, one per line."""
    return "\n".join(
        [
            f"addappid({app_id})",
            f'addappid({depot_id},1,"{key_hex}")',
            f'setManifestid({depot_id},"{manifest_id}",0)',
        ]
    )


def build_key_file(depot_id: int, key_hex: str) -> str:
    return "\n".join(dump_vdf({"depots": {str(depot_id): {"DecryptionKey": key_hex}}}))


def dump_vdf(data: dict[str, Any], indent: int = 0) -> list[str]:
    lines: list[str] = []
    indentation = "\t" * indent
    for key, value in data.items():
        formatted_key = _escape(key)
        if isinstance(value, dict):
            lines.append(f'{indentation}"{formatted_key}"')
            lines.append(f"{indentation}{{")
            lines.extend(dump_vdf(value, indent + 1))
            lines.append(f"{indentation}}}")
        else:
            lines.append(f'{indentation}"{formatted_key}"\t\t"{_escape(value)}"')
    return lines


def _escape(value: Any) -> str:
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


@dataclass
class ScriptReferences:
    """Identifiers a script file declares.

    main_app_id is the first app declared without a depot key, i.e. `addappid(N)`.
    """

    main_app_id: int | None = None
    manifest_ids: list[str] = field(default_factory=list)
    name: str | None = None


def references_app(text: str, app_id: int) -> bool:
    """True if the script declares the app itself; depot lines with a key do not count."""
    return f"addappid({app_id})" in text


def parse_script(text: str) -> ScriptReferences:
    refs = ScriptReferences()
    main = _MAIN_APP.search(text)
    if main:
        refs.main_app_id = int(main.group(1))
        if main.group(2):
            refs.name = main.group(2).strip()
    for match in _SET_MANIFEST.finditer(text):
        manifest_id = match.group(2)
        if manifest_id not in refs.manifest_ids:
            refs.manifest_ids.append(manifest_id)
    name = _NAME_COMMENT.search(text) or _NAME_FIELD.search(text)
    if name:
        refs.name = name.group(1)
    return refs
