"""Smart merge: turn an inline niri config into one include + the user's extras.

The host file is split into top-level nodes. Managed nodes (see
:class:`~nirisettings.managed.ManagedNode`) are dropped because their data
lives in the generated category files; every other node is re-emitted
verbatim, in order, after a single ``include`` of ``main.kdl``. The original
file is always copied to the backup directory before it is changed.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib

from nirisettings.errors import ConfigIOError, MergeError, ParseError
from nirisettings.generator import include_line
from nirisettings.kdl_document import Node, parse
from nirisettings.managed import ManagedNode
from nirisettings.paths import ConfigPaths
from nirisettings.storage import atomic_write, create_backup

logger = logging.getLogger("nirisettings.merge")

DEFAULT_INCLUDE_TARGET = "nirisettings/main.kdl"

MERGED_HEADER = (
    "// niri config: settings are managed by nirisettings and live in the\n"
    "// included files. Anything else below is yours and is kept as written.\n"
)


@dataclasses.dataclass
class SmartReplaceResult:
    backup_path: pathlib.Path | None = None
    include_added: bool = False
    replaced_count: int = 0
    preserved_count: int = 0
    warnings: list[str] = dataclasses.field(default_factory=list)
    replaced_nodes: list[str] = dataclasses.field(default_factory=list)
    preserved_nodes: list[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class ConfigAnalysis:
    managed: list[Node]
    preserved: list[Node]
    our_includes: list[Node]
    trailing: str = ""

    @property
    def has_include(self) -> bool:
        return bool(self.our_includes)


def _normalize_include(target: str) -> str:
    while target.startswith("./"):
        target = target[2:]
    return target


def is_our_include(node: Node, include_target: str) -> bool:
    if node.name != "include":
        return False
    arg = node.arg(0)
    return isinstance(arg, str) and _normalize_include(arg) == _normalize_include(include_target)


def analyze_config(text: str, include_target: str = DEFAULT_INCLUDE_TARGET) -> ConfigAnalysis:
    """Classify the top-level nodes of *text*; raises :class:`ParseError`."""
    doc = parse(text)
    analysis = ConfigAnalysis(managed=[], preserved=[], our_includes=[], trailing=doc.trailing)
    for node in doc.nodes:
        if is_our_include(node, include_target):
            analysis.our_includes.append(node)
        elif ManagedNode.is_managed(node.name):
            analysis.managed.append(node)
        else:
            analysis.preserved.append(node)
    return analysis


def minimal_config(include_target: str) -> str:
    return f"{MERGED_HEADER}\n{include_line(include_target)}\n"


def render_merged(analysis: ConfigAnalysis, include_target: str) -> str:
    parts = [minimal_config(include_target)]
    for node in analysis.preserved:
        leading = node.leading.strip()
        comment = " " + node.comment if node.comment else ""
        parts.append("\n" + (leading + "\n" if leading else "") + node.raw + comment + "\n")
    trailing = analysis.trailing.strip()
    if trailing:
        parts.append("\n" + trailing + "\n")
    return "".join(parts)


def _backup(paths: ConfigPaths, host: pathlib.Path) -> pathlib.Path:
    try:
        return create_backup(paths, host)
    except ConfigIOError as exc:
        raise MergeError(f"Backup failed, host config left unchanged: {exc}") from exc


def _write(host: pathlib.Path, text: str) -> None:
    try:
        atomic_write(host, text)
    except OSError as exc:
        raise MergeError(f"Could not write {host}: {exc}") from exc


def _verify(output: str, analysis: ConfigAnalysis) -> None:
    try:
        doc = parse(output)
    except ParseError as exc:
        raise MergeError(f"Merged config does not parse: {exc}") from exc
    expected = ["include"] + [n.name for n in analysis.preserved]
    if doc.names() != expected:
        raise MergeError(f"Merged config has nodes {doc.names()}, expected {expected}")


def smart_replace_config(paths: ConfigPaths) -> SmartReplaceResult:
    """Rewrite the host config as ``include`` + preserved unmanaged nodes.

    Raises :class:`MergeError` if the backup cannot be made or verified, or
    the new file cannot be produced; the host file is untouched in that case.
    """
    host = paths.niri_config
    target = paths.include_target

    if not host.exists():
        _write(host, minimal_config(target))
        logger.info("Created %s with the include directive", host)
        return SmartReplaceResult(include_added=True)

    try:
        raw = host.read_bytes()
    except OSError as exc:
        raise MergeError(f"Could not read {host}: {exc}") from exc

    try:
        analysis = analyze_config(raw.decode("utf-8"), target)
    except (UnicodeDecodeError, ParseError) as exc:
        backup = _backup(paths, host)
        _write(host, minimal_config(target))
        message = f"{host.name} could not be parsed ({exc}); the original was saved to {backup}"
        logger.warning("%s", message)
        return SmartReplaceResult(backup_path=backup, include_added=True, warnings=[message])

    preserved_names = [n.name for n in analysis.preserved]
    if analysis.has_include and not analysis.managed:
        logger.info("%s already includes %s; nothing to do", host, target)
        return SmartReplaceResult(
            preserved_count=len(preserved_names),
            preserved_nodes=preserved_names,
        )

    result = SmartReplaceResult(
        include_added=not analysis.has_include,
        replaced_count=len(analysis.managed),
        preserved_count=len(preserved_names),
        replaced_nodes=[n.name for n in analysis.managed],
        preserved_nodes=preserved_names,
    )
    if len(analysis.our_includes) > 1:
        result.warnings.append(f"Removed {len(analysis.our_includes) - 1} duplicate include(s) of {target}")

    result.backup_path = _backup(paths, host)
    output = render_merged(analysis, target)
    _verify(output, analysis)
    _write(host, output)
    logger.info(
        "Merged %s: replaced %d managed nodes, kept %d",
        host, result.replaced_count, result.preserved_count,
    )
    return result
