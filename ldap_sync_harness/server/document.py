"""Versioned, immutable view of the server's global configuration document.

The server only accepts whole-document replacement, so every change is
expressed as a patch applied to a parsed copy and serialized back in full.
Each application bumps ``revision`` and appends the patches to ``patches``;
containers that did not exist before an add are listed in ``created`` so a
later removal can tell them apart from containers the server already had.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Union

from lxml import etree

from ldap_sync_harness.exceptions import ConfigurationDocumentError

# Child values: text, None for an empty element, or a nested mapping
FieldValue = Union[str, None, "Mapping[str, FieldValue]"]

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


@dataclass(frozen=True)
class AddSection:
    """Append ``<tag>`` built from *fields* under the element at *path*.

    Missing trailing containers of *path* are created; a created container is
    inserted before the first existing sibling named in *insert_before*.
    """

    path: tuple[str, ...]
    tag: str
    fields: Mapping[str, FieldValue]
    insert_before: tuple[str, ...] = ()

    def describe(self) -> str:
        return f"add {'/'.join(self.path)}/{self.tag}"


@dataclass(frozen=True)
class RemoveSection:
    """Remove the element at *path*; nothing happens when it is absent.

    With *keep_empty* the element stays in place and only its content goes.
    """

    path: tuple[str, ...]
    keep_empty: bool = False

    def describe(self) -> str:
        verb = "clear" if self.keep_empty else "remove"
        return f"{verb} {'/'.join(self.path)}"


Patch = Union[AddSection, RemoveSection]


def _qualify(root: etree._Element, name: str) -> str:
    ns = root.nsmap.get(None)
    return f"{{{ns}}}{name}" if ns else name


def _local(tag: str) -> str:
    return etree.QName(tag).localname


def _child(parent: etree._Element, name: str) -> etree._Element | None:
    for child in parent:
        if isinstance(child.tag, str) and _local(child.tag) == name:
            return child
    return None


def _build(root: etree._Element, parent: etree._Element, tag: str, value: FieldValue) -> None:
    elem = etree.SubElement(parent, _qualify(root, tag))
    if isinstance(value, Mapping):
        for name, sub in value.items():
            _build(root, elem, name, sub)
    elif value is not None:
        elem.text = str(value)


def _ensure_container(root: etree._Element, patch: AddSection) -> tuple[etree._Element, bool]:
    current = root
    created = False
    for depth, name in enumerate(patch.path):
        nxt = _child(current, name)
        if nxt is None:
            if depth < len(patch.path) - 1:
                raise ConfigurationDocumentError(
                    f"Configuration document has no {'/'.join(patch.path[: depth + 1])} element",
                    {"path": "/".join(patch.path)},
                )
            nxt = etree.SubElement(current, _qualify(root, name))
            anchor = next(
                (c for c in current if isinstance(c.tag, str) and _local(c.tag) in patch.insert_before),
                None,
            )
            if anchor is not None:
                anchor.addprevious(nxt)
            created = True
        current = nxt
    return current, created


def _remove(root: etree._Element, patch: RemoveSection) -> None:
    current: etree._Element | None = root
    for name in patch.path:
        current = _child(current, name)
        if current is None:
            return
    if patch.keep_empty:
        for child in list(current):
            current.remove(child)
        current.text = None
        return
    parent = current.getparent()
    if parent is not None:
        # keep the following sibling's indentation intact
        prev = current.getprevious()
        if current.tail and prev is not None:
            prev.tail = current.tail
        elif current.tail:
            parent.text = current.tail
        parent.remove(current)


def _normalize(elem: etree._Element) -> tuple:
    text = (elem.text or "").strip()
    children = tuple(_normalize(c) for c in elem if isinstance(c.tag, str))
    return (elem.tag, tuple(sorted(elem.attrib.items())), text, children)


@dataclass(frozen=True)
class ConfigDocument:
    """Serialized configuration plus the history of patches applied to it."""

    content: bytes
    revision: int = 0
    patches: tuple[Patch, ...] = field(default_factory=tuple)
    created: tuple[tuple[str, ...], ...] = field(default_factory=tuple)

    @classmethod
    def from_text(cls, text: str | bytes) -> ConfigDocument:
        data = text.encode("utf-8") if isinstance(text, str) else text
        cls._parse(data)
        return cls(content=data)

    @staticmethod
    def _parse(data: bytes) -> etree._Element:
        try:
            return etree.fromstring(data, parser=_PARSER)
        except etree.XMLSyntaxError as exc:
            raise ConfigurationDocumentError(f"Configuration document is not valid XML: {exc}") from exc

    @property
    def root(self) -> etree._Element:
        """A fresh parsed copy; mutating it does not affect this document."""
        return self._parse(self.content)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def apply(self, *patches: Patch) -> ConfigDocument:
        """Return a new document with *patches* applied in order."""
        root = self.root
        created = list(self.created)
        for patch in patches:
            if isinstance(patch, AddSection):
                container, is_new = _ensure_container(root, patch)
                if is_new:
                    created.append(patch.path)
                _build(root, container, patch.tag, patch.fields)
            elif isinstance(patch, RemoveSection):
                _remove(root, patch)
                if not patch.keep_empty:
                    created = [p for p in created if p[: len(patch.path)] != patch.path]
            else:
                raise TypeError(f"Unsupported patch type: {type(patch).__name__}")
        content = etree.tostring(root, xml_declaration=True, encoding="UTF-8")
        return ConfigDocument(
            content=content,
            revision=self.revision + 1,
            patches=self.patches + tuple(patches),
            created=tuple(created),
        )

    def find(self, *path: str) -> etree._Element | None:
        current: etree._Element | None = self.root
        for name in path:
            current = _child(current, name)
            if current is None:
                return None
        return current

    def findall(self, *path: str) -> list[etree._Element]:
        """All elements matching *path*, where the last step may repeat."""
        parent = self.find(*path[:-1]) if len(path) > 1 else self.root
        if parent is None:
            return []
        return [c for c in parent if isinstance(c.tag, str) and _local(c.tag) == path[-1]]

    def semantically_equal(self, other: ConfigDocument) -> bool:
        """Compare element structure, attributes and text, ignoring formatting."""
        return _normalize(self.root) == _normalize(other.root)


def describe_patches(patches: Sequence[Patch]) -> list[str]:
    return [p.describe() for p in patches]
