"""Placeholder grammar shared by extraction, rendering and resolution.

Two surface syntaxes refer to the same variable:

* author form: ``{{name}}`` or ``{{name.field.path}}``;
* directive form consumed by the server-side template engine:
  ``<span th:utext="${name.path}"/>``, plus ``<th:block th:utext="${name}"/>``
  (subject lines) and the legacy ``<th:utext="${name}">``.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Callable, Iterator, Literal

from mailforge.config import VARIABLE_SUFFIX_LENGTH

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_PATH = rf"{_NAME}(?:\.[A-Za-z0-9_]+)*"

IDENTIFIER_RE = re.compile(rf"^{_NAME}$")
AUTHOR_RE = re.compile(rf"\{{\{{({_PATH})\}}\}}")
DIRECTIVE_RE = re.compile(
    rf'<(?:span|th:block)\s+th:utext="\$\{{({_PATH})\}}"\s*/>'
    rf'|<th:utext="\$\{{({_PATH})\}}">'
)
_ANY_PLACEHOLDER_RE = re.compile(rf"{AUTHOR_RE.pattern}|{DIRECTIVE_RE.pattern}")

_IF_OPEN_RE = re.compile(rf"\{{\{{if\s+({_PATH})\}}\}}")
_IF_CLOSE = "{{/if}}"
_EACH_OPEN_RE = re.compile(rf"\{{\{{each\s+({_NAME})\s+in\s+({_PATH})\}}\}}")
_EACH_CLOSE = "{{/each}}"
_TH_IF_OPEN_RE = re.compile(rf'<th:if="\$\{{({_PATH})\}}">')
_TH_EACH_OPEN_RE = re.compile(rf'<th:each="({_NAME})\s*:\s*\$\{{({_PATH})\}}">')

_CAMEL_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALNUM_RE = re.compile(r"[^a-zA-Z0-9]")

Syntax = Literal["author", "directive"]


@dataclass(frozen=True)
class Placeholder:
    """One placeholder occurrence inside a string."""

    name: str
    path: tuple[str, ...]
    raw: str
    syntax: Syntax
    start: int
    end: int

    @property
    def dotted(self) -> str:
        return ".".join((self.name, *self.path))


def _from_match(match: re.Match[str]) -> Placeholder:
    author, span_directive, legacy_directive = match.group(1, 2, 3)
    dotted = author or span_directive or legacy_directive
    name, *path = dotted.split(".")
    return Placeholder(
        name=name,
        path=tuple(path),
        raw=match.group(0),
        syntax="author" if author else "directive",
        start=match.start(),
        end=match.end(),
    )


def iter_placeholders(text: str | None) -> Iterator[Placeholder]:
    """Yield every placeholder occurrence of either syntax in textual order."""
    if not text:
        return
    for match in _ANY_PLACEHOLDER_RE.finditer(text):
        yield _from_match(match)


def extract_placeholder_names(text: str | None) -> list[str]:
    """Unique variable names referenced by ``text``, in order of first appearance."""
    names: list[str] = []
    for placeholder in iter_placeholders(text):
        if placeholder.name not in names:
            names.append(placeholder.name)
    return names


def substitute_placeholders(
    text: str | None, lookup: Callable[[Placeholder], str | None]
) -> str:
    """Replace each placeholder by ``lookup(placeholder)``; ``None`` keeps it verbatim."""
    if not text:
        return text or ""

    def _sub(match: re.Match[str]) -> str:
        replacement = lookup(_from_match(match))
        return match.group(0) if replacement is None else replacement

    return _ANY_PLACEHOLDER_RE.sub(_sub, text)


def to_directive(name: str, path: tuple[str, ...] = ()) -> str:
    """Value-interpolation directive for ``name`` (and an optional field path)."""
    dotted = ".".join((name, *path))
    return f'<span th:utext="${{{dotted}}}"/>'


def to_subject_directive(name: str, path: tuple[str, ...] = ()) -> str:
    dotted = ".".join((name, *path))
    return f'<th:block th:utext="${{{dotted}}}"/>'


def to_production_syntax(text: str | None, *, subject: bool = False) -> str:
    """Convert author-facing placeholders and block markers to directives."""
    if not text:
        return text or ""
    converted = _IF_OPEN_RE.sub(lambda m: f'<th:if="${{{m.group(1)}}}">', text)
    converted = converted.replace(_IF_CLOSE, "</th:if>")
    converted = _EACH_OPEN_RE.sub(
        lambda m: f'<th:each="{m.group(1)} : ${{{m.group(2)}}}">', converted
    )
    converted = converted.replace(_EACH_CLOSE, "</th:each>")
    emit = to_subject_directive if subject else to_directive

    def _sub(match: re.Match[str]) -> str:
        name, *path = match.group(1).split(".")
        return emit(name, tuple(path))

    return AUTHOR_RE.sub(_sub, converted)


def to_author_syntax(text: str | None) -> str:
    """Convert directives back to the ``{{...}}`` form shown to authors."""
    if not text:
        return text or ""

    def _sub(match: re.Match[str]) -> str:
        placeholder = _from_match(match)
        if placeholder.syntax == "author":
            return placeholder.raw
        return "{{" + placeholder.dotted + "}}"

    converted = _ANY_PLACEHOLDER_RE.sub(_sub, text)
    converted = _TH_IF_OPEN_RE.sub(lambda m: "{{if " + m.group(1) + "}}", converted)
    converted = converted.replace("</th:if>", _IF_CLOSE)
    converted = _TH_EACH_OPEN_RE.sub(
        lambda m: "{{each " + m.group(1) + " in " + m.group(2) + "}}", converted
    )
    return converted.replace("</th:each>", _EACH_CLOSE)


def is_valid_identifier(name: str | None) -> bool:
    return bool(name) and IDENTIFIER_RE.match(name) is not None


def create_label(name: str) -> str:
    """Human-readable label for a variable name (``firstName`` -> ``First Name``)."""
    spaced = _CAMEL_BOUNDARY_RE.sub(r"\1 \2", name)
    spaced = re.sub(r"[-_]+", " ", spaced)
    return " ".join(word[:1].upper() + word[1:] for word in spaced.split())


# ---------------------------------------------------------------------------
# Generated collection names
# ---------------------------------------------------------------------------


def section_suffix(section_id: str) -> str:
    """Deterministic suffix of at most eight characters derived from a section id."""
    clean = _NON_ALNUM_RE.sub("", section_id).lower()
    if not clean:
        clean = hashlib.sha1(section_id.encode("utf-8")).hexdigest()
    return clean[-VARIABLE_SUFFIX_LENGTH:]


def list_variable_name(section_id: str) -> str:
    return f"items_{section_suffix(section_id)}"


def label_variable_name(section_id: str) -> str:
    return f"label_{section_suffix(section_id)}"


def table_rows_variable_name(section_id: str) -> str:
    return f"tableRows_{section_suffix(section_id)}"


def table_headers_variable_name(section_id: str) -> str:
    return f"tableHeaders_{section_suffix(section_id)}"


def field_name_for_header(header: str, index: int) -> str:
    """Identifier used as ``row.<field>`` for a table column."""
    field = re.sub(r"[^a-zA-Z0-9]+", "_", header).strip("_").lower()
    if not field:
        return f"col{index + 1}"
    if field[0].isdigit():
        field = f"_{field}"
    return field
