"""Locate and rewrite version fields in a service descriptor (``pom.xml``).

The descriptor is scanned into a light element tree that remembers where
each element's text sits in the original file. Edits splice new values into
those spans and leave every other byte alone, so comments, indentation and
attribute order survive a rewrite. Two fields matter:

- the project version: the first ``<version>`` element in document order;
- a dependency version: the ``<version>`` child of a ``<dependency>`` block
  whose ``<artifactId>`` child names the artifact.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from libroll.core.result import Err, Ok, Result
from libroll.platform.files import atomic_write_text, read_text_if_exists

__all__ = [
    "ManifestDocument",
    "ManifestError",
    "read_project_version",
    "write_dependency_version",
    "write_project_version",
]

_TOKEN_RE = re.compile(
    r"<!--.*?-->"
    r"|<!\[CDATA\[.*?\]\]>"
    r"|<\?.*?\?>"
    r"|<!DOCTYPE[^\[>]*(?:\[.*?\])?\s*>"
    r"|<(?P<close>/?)(?P<name>[A-Za-z_][\w.:-]*)"
    r"(?P<attrs>(?:[^>\"']|\"[^\"]*\"|'[^']*')*?)(?P<empty>/?)>",
    re.DOTALL,
)

_VERSION = "version"
_DEPENDENCY = "dependency"
_ARTIFACT_ID = "artifactId"


@dataclass(frozen=True, slots=True)
class ManifestError:
    kind: Literal[
        "manifest_missing",
        "manifest_invalid",
        "field_missing",
        "dependency_not_declared",
        "write_failed",
    ]
    message: str
    path: Path


@dataclass(eq=False, slots=True)
class _Element:
    name: str  # local name, namespace prefix stripped
    raw_name: str
    start: int  # offset of '<'
    content_start: int
    content_end: int = -1
    end: int = -1  # offset just past the closing '>'
    self_closing: bool = False
    children: list[_Element] = field(default_factory=list)

    def child(self, name: str) -> _Element | None:
        for c in self.children:
            if c.name == name:
                return c
        return None


@dataclass(frozen=True, slots=True)
class _Edit:
    start: int
    end: int
    replacement: str


class ManifestDocument:
    """A parsed descriptor plus its original text."""

    def __init__(self, path: Path, text: str, elements: list[_Element]) -> None:
        self.path = path
        self._text = text
        self._elements = elements  # document order

    @classmethod
    def load(cls, path: Path) -> Result[ManifestDocument, ManifestError]:
        try:
            text = read_text_if_exists(path)
        except (OSError, UnicodeDecodeError) as e:
            return Err(ManifestError("manifest_invalid", f"cannot read manifest: {e}", path))
        if text is None:
            return Err(ManifestError("manifest_missing", f"manifest not found: {path}", path))

        elements = _scan(text)
        if isinstance(elements, Err):
            return Err(ManifestError("manifest_invalid", elements.error, path))
        return Ok(cls(path, text, elements.value))

    @property
    def text(self) -> str:
        return self._text

    def project_version_element(self) -> _Element | None:
        for el in self._elements:
            if el.name == _VERSION:
                return el
        return None

    def dependency_blocks(self, artifact_id: str) -> list[_Element]:
        blocks: list[_Element] = []
        for el in self._elements:
            if el.name != _DEPENDENCY:
                continue
            artifact = el.child(_ARTIFACT_ID)
            if artifact is not None and self.text_of(artifact) == artifact_id:
                blocks.append(el)
        return blocks

    def text_of(self, el: _Element) -> str:
        if el.self_closing:
            return ""
        return self._text[el.content_start : el.content_end].strip()

    def set_text(self, targets: list[_Element], value: str) -> None:
        """Replace the text of each target, keeping surrounding whitespace."""
        edits = [self._edit_for(el, value) for el in targets]
        text = self._text
        for edit in sorted(edits, key=lambda e: e.start, reverse=True):
            text = text[: edit.start] + edit.replacement + text[edit.end :]
        self._text = text
        rescanned = _scan(text)
        if isinstance(rescanned, Ok):
            self._elements = rescanned.value

    def save(self) -> Result[None, ManifestError]:
        try:
            atomic_write_text(self.path, self._text)
        except OSError as e:
            return Err(ManifestError("write_failed", f"cannot write manifest: {e}", self.path))
        return Ok(None)

    def _edit_for(self, el: _Element, value: str) -> _Edit:
        if el.self_closing:
            return _Edit(el.start, el.end, f"<{el.raw_name}>{value}</{el.raw_name}>")
        inner = self._text[el.content_start : el.content_end]
        stripped = inner.strip()
        if not stripped:
            return _Edit(el.content_start, el.content_end, value)
        offset = el.content_start + inner.index(stripped)
        return _Edit(offset, offset + len(stripped), value)


def _scan(text: str) -> Result[list[_Element], str]:
    root = _Element(name="#document", raw_name="", start=0, content_start=0)
    stack: list[_Element] = [root]
    ordered: list[_Element] = []

    for m in _TOKEN_RE.finditer(text):
        raw_name = m.group("name")
        if raw_name is None:
            continue  # comment, CDATA, processing instruction, doctype
        local = raw_name.rsplit(":", 1)[-1]

        if m.group("close"):
            top = stack[-1]
            if len(stack) == 1 or top.raw_name != raw_name:
                line = text.count("\n", 0, m.start()) + 1
                return Err(f"unexpected </{raw_name}> at line {line}")
            top.content_end = m.start()
            top.end = m.end()
            stack.pop()
            continue

        el = _Element(name=local, raw_name=raw_name, start=m.start(), content_start=m.end())
        stack[-1].children.append(el)
        ordered.append(el)
        if m.group("empty"):
            el.self_closing = True
            el.content_end = m.end()
            el.end = m.end()
        else:
            stack.append(el)

    if len(stack) > 1:
        return Err(f"unclosed <{stack[-1].raw_name}>")
    return Ok(ordered)


def read_project_version(path: Path) -> Result[str, ManifestError]:
    """Return the text of the first ``<version>`` element, trimmed."""
    loaded = ManifestDocument.load(path)
    if isinstance(loaded, Err):
        return loaded
    doc = loaded.value

    el = doc.project_version_element()
    if el is None:
        return Err(ManifestError("field_missing", f"no <version> field in {path.name}", path))
    return Ok(doc.text_of(el))


def write_dependency_version(
    path: Path,
    artifact_id: str,
    new_version: str,
) -> Result[int, ManifestError]:
    """Rewrite the version of every ``<dependency>`` block for ``artifact_id``.

    Returns:
        Ok(number of version fields rewritten). Zero when the dependency is
        declared without an explicit version (e.g. managed by a parent).
    """
    loaded = ManifestDocument.load(path)
    if isinstance(loaded, Err):
        return loaded
    doc = loaded.value

    blocks = doc.dependency_blocks(artifact_id)
    if not blocks:
        return Err(
            ManifestError(
                "dependency_not_declared",
                f"{artifact_id} is not declared as a dependency in {path.name}",
                path,
            )
        )

    targets = [v for v in (b.child(_VERSION) for b in blocks) if v is not None]
    if not targets:
        return Ok(0)

    doc.set_text(targets, new_version)
    saved = doc.save()
    if isinstance(saved, Err):
        return saved
    return Ok(len(targets))


def write_project_version(path: Path, new_version: str) -> Result[None, ManifestError]:
    """Rewrite the first ``<version>`` element only."""
    loaded = ManifestDocument.load(path)
    if isinstance(loaded, Err):
        return loaded
    doc = loaded.value

    el = doc.project_version_element()
    if el is None:
        return Err(ManifestError("field_missing", f"no <version> field in {path.name}", path))

    doc.set_text([el], new_version)
    return doc.save()
