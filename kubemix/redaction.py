"""Manifest redaction engine.

Masks the *values* of sensitive fields in serialized kubectl output while
leaving keys, non-sensitive values and document structure untouched.

Input may be a single document, a YAML multi-document stream, a JSON
``List`` object whose ``items`` hold many documents, or a bare JSON array.
Sensitive items can sit inside non-sensitive list wrappers, so list
containers are walked recursively and every item is spliced back in place.

Redaction is best-effort: unparseable input is logged and returned
unchanged so one odd block never blocks the rest of the pipeline.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from kubemix.models.config import OutputFormat
from kubemix.observability.logging import get_logger

if TYPE_CHECKING:
    import structlog

REDACTION_PLACEHOLDER = "*****"
SECRET_KIND = "Secret"

# Mapping fields whose values are masked on a sensitive document.
REDACTABLE_FIELDS: tuple[str, ...] = ("data", "stringData")

_YAML_WIDTH = 4096

SensitivityPredicate = Callable[[Mapping[str, Any]], bool]


# ---------------------------------------------------------------------------
# YAML 1.2 core schema
# ---------------------------------------------------------------------------

# kubectl emits YAML 1.2. PyYAML's defaults are YAML 1.1, which read plain
# scalars such as ``12:30`` (base 60), ``1_5``, ``yes`` or ``=`` as something
# other than strings. Loading and dumping share these resolvers so every
# scalar keeps its meaning across a redaction pass.
_CORE_RESOLVERS: tuple[tuple[str, str, str], ...] = (
    ("tag:yaml.org,2002:null", r"^(?:~|null|Null|NULL|)$", "~nN"),
    ("tag:yaml.org,2002:bool", r"^(?:true|True|TRUE|false|False|FALSE)$", "tTfF"),
    ("tag:yaml.org,2002:int", r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$", "-+0123456789"),
    (
        "tag:yaml.org,2002:float",
        r"^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$",
        "-+.0123456789",
    ),
)


def _install_core_resolvers(cls: type[yaml.resolver.BaseResolver]) -> None:
    for tag, pattern, first in _CORE_RESOLVERS:
        chars = list(first) + ([""] if tag.endswith(":null") else [])
        cls.add_implicit_resolver(tag, re.compile(pattern), chars)


def _construct_core_int(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> int:
    value = loader.construct_scalar(node)
    if value.startswith("0o"):
        return int(value[2:], 8)
    if value.startswith("0x"):
        return int(value[2:], 16)
    # leading zeros are decimal in YAML 1.2
    return int(value, 10)


class CoreLoader(yaml.SafeLoader):
    """Safe loader resolving plain scalars per the YAML 1.2 core schema."""

    yaml_implicit_resolvers: dict = {}


class CoreDumper(yaml.SafeDumper):
    """Safe dumper that quotes exactly the strings ``CoreLoader`` would retype."""

    yaml_implicit_resolvers: dict = {}


_install_core_resolvers(CoreLoader)
_install_core_resolvers(CoreDumper)
CoreLoader.add_constructor("tag:yaml.org,2002:int", _construct_core_int)


def is_secret(doc: Mapping[str, Any]) -> bool:
    """Default sensitivity rule: the document is a Secret."""
    return doc.get("kind") == SECRET_KIND


# ---------------------------------------------------------------------------
# Document variants
# ---------------------------------------------------------------------------


@dataclass
class SingleDoc:
    """One resource document."""

    body: dict[str, Any]


@dataclass
class ListDoc:
    """A list container. ``body`` is None for a bare JSON array."""

    body: dict[str, Any] | None
    items: list[DocNode] = field(default_factory=list)


@dataclass
class OpaqueDoc:
    """Anything that is not a mapping (empty documents, scalars)."""

    value: Any


DocNode = SingleDoc | ListDoc | OpaqueDoc


def to_node(value: Any) -> DocNode:
    """Wrap a parsed value in its document variant."""
    if isinstance(value, list):
        return ListDoc(body=None, items=[to_node(v) for v in value])
    if isinstance(value, dict):
        items = value.get("items")
        if isinstance(items, list):
            return ListDoc(body=value, items=[to_node(v) for v in items])
        return SingleDoc(body=value)
    return OpaqueDoc(value=value)


@dataclass
class RedactionResult:
    """Outcome of one redaction pass."""

    text: str
    documents: int = 0
    sensitive_documents: int = 0
    redacted_values: int = 0
    parsed: bool = True

    @property
    def changed(self) -> bool:
        return self.redacted_values > 0


@dataclass
class _Counters:
    sensitive_documents: int = 0
    redacted_values: int = 0


def parse_documents(raw_text: str, fmt: OutputFormat | str) -> list[Any]:
    """Parse YAML (multi-document) or JSON text into Python values.

    Raises:
        yaml.YAMLError / ValueError: the text is not valid for ``fmt``.
    """
    fmt = OutputFormat(fmt)
    if fmt is OutputFormat.YAML:
        return list(yaml.load_all(raw_text, Loader=CoreLoader))
    if fmt is OutputFormat.JSON:
        return [json.loads(raw_text)]
    raise ValueError(f"Cannot parse documents from {fmt} output")


def iter_resources(value: Any) -> list[dict[str, Any]]:
    """Flatten parsed values and list wrappers into resource documents."""
    node = value if isinstance(value, (SingleDoc, ListDoc, OpaqueDoc)) else to_node(value)
    if isinstance(node, SingleDoc):
        return [node.body]
    if isinstance(node, ListDoc):
        found: list[dict[str, Any]] = []
        for item in node.items:
            found.extend(iter_resources(item))
        return found
    return []


class Redactor:
    """Replaces sensitive field values with a fixed placeholder.

    Args:
        is_sensitive: Predicate deciding whether a document is sensitive.
        placeholder:  Replacement for every masked value.
        log:          Logger handle; defaults to the ``redaction`` component.
    """

    def __init__(
        self,
        is_sensitive: SensitivityPredicate = is_secret,
        placeholder: str = REDACTION_PLACEHOLDER,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._is_sensitive = is_sensitive
        self._placeholder = placeholder
        self._log = log or get_logger("redaction")

    def redact(self, raw_text: str, fmt: OutputFormat | str) -> str:
        return self.redact_with_stats(raw_text, fmt).text

    def redact_with_stats(self, raw_text: str, fmt: OutputFormat | str) -> RedactionResult:
        """Redact ``raw_text`` and report what was found.

        When nothing needs masking the original text is returned byte for
        byte, which also makes a second pass over redacted output a no-op.
        """
        if not raw_text.strip():
            return RedactionResult(text=raw_text)

        fmt = OutputFormat(fmt)
        if fmt is OutputFormat.TEXT:
            self._log.debug("redaction_skipped", reason="tabular output carries no secret payloads")
            return RedactionResult(text=raw_text, parsed=False)

        try:
            documents = parse_documents(raw_text, fmt)
        except (yaml.YAMLError, ValueError) as exc:
            self._log.warning(
                "redaction_parse_failed",
                format=str(fmt),
                error=str(exc).splitlines()[0] if str(exc) else type(exc).__name__,
                preview=raw_text[:100],
            )
            return RedactionResult(text=raw_text, parsed=False)

        counters = _Counters()
        redacted = [self._redact_node(to_node(doc), counters) for doc in documents]

        result = RedactionResult(
            text=raw_text,
            documents=len(documents),
            sensitive_documents=counters.sensitive_documents,
            redacted_values=counters.redacted_values,
        )
        if counters.redacted_values:
            result.text = self._dump(redacted, fmt, raw_text)

        self._log.debug(
            "redaction_complete",
            format=str(fmt),
            documents=result.documents,
            sensitive_documents=result.sensitive_documents,
            redacted_values=result.redacted_values,
        )
        return result

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _redact_node(self, node: DocNode, counters: _Counters) -> Any:
        if isinstance(node, ListDoc):
            items = [self._redact_node(item, counters) for item in node.items]
            if node.body is None:
                return items
            if self._is_sensitive(node.body):
                self._mask(node.body, counters)
            node.body["items"] = items
            return node.body
        if isinstance(node, SingleDoc):
            if self._is_sensitive(node.body):
                self._mask(node.body, counters)
            return node.body
        return node.value

    def _mask(self, doc: dict[str, Any], counters: _Counters) -> None:
        counters.sensitive_documents += 1
        found = False
        for field_name in REDACTABLE_FIELDS:
            mapping = doc.get(field_name)
            if not isinstance(mapping, dict):
                continue
            found = True
            for key in list(mapping):
                if mapping[key] != self._placeholder:
                    mapping[key] = self._placeholder
                    counters.redacted_values += 1
        if not found:
            name = doc.get("metadata", {}).get("name") if isinstance(doc.get("metadata"), dict) else None
            self._log.debug("sensitive_document_without_data", kind=doc.get("kind"), name=name)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @staticmethod
    def _dump(documents: list[Any], fmt: OutputFormat, original: str) -> str:
        if fmt is OutputFormat.JSON:
            indent = 4 if "\n" in original.strip() else None
            text = json.dumps(documents[0], indent=indent, ensure_ascii=False)
            return text + "\n" if original.endswith("\n") else text
        return yaml.dump_all(
            documents,
            Dumper=CoreDumper,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
            explicit_start=original.lstrip().startswith("---"),
            width=_YAML_WIDTH,
        )


def redact(
    raw_text: str,
    fmt: OutputFormat | str,
    is_sensitive: SensitivityPredicate = is_secret,
    *,
    placeholder: str = REDACTION_PLACEHOLDER,
    log: structlog.stdlib.BoundLogger | None = None,
) -> str:
    """Return ``raw_text`` with every sensitive value masked."""
    return Redactor(is_sensitive, placeholder, log).redact(raw_text, fmt)


def redact_with_stats(
    raw_text: str,
    fmt: OutputFormat | str,
    is_sensitive: SensitivityPredicate = is_secret,
    *,
    placeholder: str = REDACTION_PLACEHOLDER,
    log: structlog.stdlib.BoundLogger | None = None,
) -> RedactionResult:
    return Redactor(is_sensitive, placeholder, log).redact_with_stats(raw_text, fmt)
