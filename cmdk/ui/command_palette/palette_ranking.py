"""
Filtering and ranking for the command palette.

Turns a query, a catalogue and the host's recent command ids into an
ordered, sectioned result list. Everything here is pure: the same inputs
always produce the same output.

- Empty query: a leading "Recent" section, then one section per group in
  declaration order, then ungrouped commands.
- Any other query: a single flat section ranked by match tier, ties kept
  in catalogue order.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import IntEnum

from cmdk.config.constants import (
    ALL_SECTION_ID,
    OTHER_SECTION_ID,
    OTHER_SECTION_LABEL,
    RECENT_SECTION_ID,
    RECENT_SECTION_LABEL,
)

from .palette_commands import CatalogueStore, Command

FilterFn = Callable[[Command, str], bool]


class MatchTier(IntEnum):
    """How a command matched the query. Lower sorts first."""

    LABEL_PREFIX = 0
    LABEL_SUBSTRING = 1
    SECONDARY = 2  # description or keyword
    SUBSEQUENCE = 3
    CUSTOM = 4  # accepted by a host filter only


@dataclass(frozen=True)
class ResultSection:
    """A run of results rendered under one heading ("" means no heading)."""

    id: str
    label: str
    commands: tuple[Command, ...]


@dataclass(frozen=True)
class PaletteResults:
    """Ranked output: sections for rendering, items for navigation."""

    sections: tuple[ResultSection, ...] = ()
    items: tuple[Command, ...] = field(default=())

    @classmethod
    def from_sections(cls, sections: Iterable[ResultSection]) -> "PaletteResults":
        kept = tuple(s for s in sections if s.commands)
        return cls(sections=kept, items=tuple(c for s in kept for c in s.commands))

    def __len__(self) -> int:
        return len(self.items)


def normalize_query(query: str) -> str:
    """Case-folded, stripped query used for matching."""
    return query.strip().lower()


def is_subsequence(needle: str, haystack: str) -> bool:
    """True if every character of needle appears in haystack, in order."""
    chars = iter(haystack)
    return all(ch in chars for ch in needle)


def match_tier(command: Command, needle: str, subsequence_matching: bool = False) -> MatchTier | None:
    """Classify how a command matches an already-normalized query."""
    label = command.label.lower()
    if label.startswith(needle):
        return MatchTier.LABEL_PREFIX
    if needle in label:
        return MatchTier.LABEL_SUBSTRING
    if command.description and needle in command.description.lower():
        return MatchTier.SECONDARY
    if any(needle in kw.lower() for kw in command.keywords):
        return MatchTier.SECONDARY
    if subsequence_matching and is_subsequence(needle, label):
        return MatchTier.SUBSEQUENCE
    return None


def _grouped_sections(
    catalogue: CatalogueStore,
    recent_ids: Iterable[str],
    max_recent: int | None,
) -> list[ResultSection]:
    recent: list[Command] = []
    seen: set[str] = set()
    for command_id in recent_ids:
        if max_recent is not None and len(recent) >= max_recent:
            break
        command = catalogue.get(command_id)
        if command is None or command_id in seen:
            continue
        seen.add(command_id)
        recent.append(command)

    by_group: dict[str, list[Command]] = {g.id: [] for g in catalogue.groups}
    ungrouped: list[Command] = []
    for command in catalogue:
        if command.id in seen:
            continue
        group = catalogue.group_of(command)
        if group is None:
            ungrouped.append(command)
        else:
            by_group[group.id].append(command)

    sections = [ResultSection(RECENT_SECTION_ID, RECENT_SECTION_LABEL, tuple(recent))]
    sections.extend(
        ResultSection(g.id, g.label, tuple(by_group[g.id])) for g in catalogue.groups
    )

    # Ungrouped commands only get a heading when something else is shown
    has_other_sections = any(s.commands for s in sections)
    sections.append(
        ResultSection(
            OTHER_SECTION_ID,
            OTHER_SECTION_LABEL if has_other_sections else "",
            tuple(ungrouped),
        )
    )
    return sections


def _ranked_section(
    catalogue: CatalogueStore,
    query: str,
    subsequence_matching: bool,
    filter_fn: FilterFn | None,
) -> ResultSection:
    needle = normalize_query(query)
    scored: list[tuple[MatchTier, Command]] = []

    for command in catalogue:
        tier = match_tier(command, needle, subsequence_matching)
        if filter_fn is not None:
            if not filter_fn(command, query):
                continue
            if tier is None:
                tier = MatchTier.CUSTOM
        elif tier is None:
            continue
        scored.append((tier, command))

    # list.sort is stable, so equal tiers keep catalogue order
    scored.sort(key=lambda x: x[0])
    return ResultSection(ALL_SECTION_ID, "", tuple(cmd for _, cmd in scored))


def rank_commands(
    query: str,
    catalogue: CatalogueStore,
    recent_ids: Iterable[str] = (),
    *,
    max_recent: int | None = None,
    subsequence_matching: bool = False,
    filter_fn: FilterFn | None = None,
) -> PaletteResults:
    """
    Produce the ordered result list for a query.

    Args:
        query: Raw query text; whitespace-only counts as empty
        catalogue: Commands and groups for the session
        recent_ids: Most-recent-first command ids, only used for empty queries
        max_recent: Cap on the Recent section (None for no cap)
        subsequence_matching: Also accept in-order character matches on labels
        filter_fn: Host predicate replacing the built-in candidate test

    Returns:
        PaletteResults with sections and the flat navigation order
    """
    if not normalize_query(query):
        return PaletteResults.from_sections(_grouped_sections(catalogue, recent_ids, max_recent))
    return PaletteResults.from_sections(
        [_ranked_section(catalogue, query, subsequence_matching, filter_fn)]
    )
