"""Depth-guarded traversal of the section tree."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Iterator

from mailforge.config import MAILFORGE_MAX_NESTING_DEPTH
from mailforge.schemas import Section, SectionKind

logger = logging.getLogger(__name__)


def nested_sections(section: Section) -> list[Section]:
    """Direct descendants: container children, or layout cells row-major."""
    if section.kind is SectionKind.CONTAINER:
        return list(section.children)
    if section.kind is SectionKind.LAYOUT_TABLE and section.layout is not None:
        return [
            nested
            for row in section.layout.rows
            for cell in row.cells
            for nested in cell.sections
        ]
    return list(section.children)


def walk_sections(
    sections: Iterable[Section], *, max_depth: int = MAILFORGE_MAX_NESTING_DEPTH
) -> Iterator[tuple[Section, int]]:
    """Yield ``(section, depth)`` depth-first, parents before their descendants.

    Top-level sections have depth 0. Descendants below ``max_depth`` are not
    visited; the truncation is logged.
    """
    stack: list[tuple[Section, int]] = [(section, 0) for section in reversed(list(sections))]
    while stack:
        section, depth = stack.pop()
        yield section, depth
        nested = nested_sections(section)
        if not nested:
            continue
        if depth >= max_depth:
            logger.warning(
                "Section %s exceeds the maximum nesting depth of %d; %d nested sections skipped",
                section.id,
                max_depth,
                len(nested),
            )
            continue
        stack.extend((child, depth + 1) for child in reversed(nested))


def too_deep_sections(
    sections: Iterable[Section], *, max_depth: int = MAILFORGE_MAX_NESTING_DEPTH
) -> list[Section]:
    """Sections whose nested content lies beyond ``max_depth``."""
    result: list[Section] = []
    stack: list[tuple[Section, int]] = [(section, 0) for section in reversed(list(sections))]
    while stack:
        section, depth = stack.pop()
        nested = nested_sections(section)
        if not nested:
            continue
        if depth >= max_depth:
            result.append(section)
            continue
        stack.extend((child, depth + 1) for child in reversed(nested))
    return result


def count_kinds(sections: Iterable[Section], *, max_depth: int = MAILFORGE_MAX_NESTING_DEPTH) -> Counter[SectionKind]:
    """Occurrences of each kind across the whole tree."""
    return Counter(section.kind for section, _ in walk_sections(sections, max_depth=max_depth))
