"""
Optional-component selection.

Answer parsing for the interactive prompts.  Reading from stdin is
left to the caller (the CLI passes ``click.prompt``); these helpers
only decide what an answer means.

Rules:
  * yes/no: exactly ``y`` or ``Y`` (surrounding whitespace ignored)
    is yes; anything else, including ``yes``, is no.
  * multi-select: whitespace-separated tokens, each a prompt number
    or a component key.  Unknown tokens are ignored with a warning.
    There is no default selection and no re-prompt.
"""

from __future__ import annotations

import logging
from typing import Callable

from devsetup.core.models.target import ComponentSpec

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]


def is_affirmative(answer: str | None) -> bool:
    """True only for ``y`` / ``Y``."""
    return (answer or "").strip() in ("y", "Y")


def parse_selection(
    raw: str | list[str] | None,
    catalog: dict[str, ComponentSpec],
) -> list[ComponentSpec]:
    """Map a free-text selection to catalog entries.

    Args:
        raw: e.g. ``"1 3"``, ``"postgresql redis"`` or a list of tokens.
        catalog: components keyed by their prompt number.

    Returns:
        Selected components, in the order given, without duplicates.
    """
    if raw is None:
        return []
    tokens = raw.split() if isinstance(raw, str) else [str(t) for t in raw]

    by_key = {spec.key: spec for spec in catalog.values()}
    selected: list[ComponentSpec] = []
    for token in tokens:
        spec = catalog.get(token) or by_key.get(token.lower())
        if spec is None:
            logger.warning("Ignoring unknown selection: %r", token)
            continue
        if spec not in selected:
            selected.append(spec)
    return selected


def selection_menu(catalog: dict[str, ComponentSpec]) -> str:
    """Numbered menu text shown before the multi-select prompt."""
    lines = ["Select databases to install (enter numbers separated by space):"]
    lines += [f"{num}) {spec.label}" for num, spec in catalog.items()]
    return "\n".join(lines)


def choose_databases(
    catalog: dict[str, ComponentSpec],
    prompt: Prompt,
    *,
    preselected: list[str] | str | None = None,
) -> list[ComponentSpec]:
    """Ask whether to install databases, then which ones.

    ``preselected`` (from config or a CLI flag) answers both prompts
    without touching stdin.
    """
    if preselected is not None:
        return parse_selection(preselected, catalog)

    if not is_affirmative(prompt("🗄️  Would you like to install any databases? (y/n)")):
        return []
    return parse_selection(prompt(selection_menu(catalog)), catalog)


def choose_container_engine(
    prompt: Prompt,
    *,
    preselected: bool | None = None,
) -> bool:
    """Ask whether to install the container engine."""
    if preselected is not None:
        return preselected
    return is_affirmative(prompt("🐳 Would you like to install Docker? (y/n)"))
