import logging
import re

from notegraph.models.note import Link

logger = logging.getLogger(__name__)

# [[Target]] or [[Target|Alias]]; brackets are not allowed inside either part.
_LINK_RE = re.compile(r"\[\[([^\[\]|]+)(?:\|([^\[\]]+))?\]\]")


def _rename_pattern(title: str) -> re.Pattern:
    return re.compile(r"\[\[\s*" + re.escape(title) + r"\s*(\|[^\[\]]+)?\]\]")


def parse_links(text: str | None, source_title: str | None = None) -> list[Link]:
    """
    Return one Link per well-formed `[[...]]` occurrence, left to right.

    Duplicate targets are kept. An unterminated `[[` yields nothing.
    """
    links: list[Link] = []
    for match in _LINK_RE.finditer(text or ""):
        target = match.group(1).strip()
        if not target:
            continue
        alias = (match.group(2) or "").strip()
        links.append(
            Link(
                source_title=source_title,
                target_title=target,
                display_text=alias or target,
                raw_match=match.group(0),
                position=match.start(),
                end=match.end(),
            )
        )
    return links


def dedupe_targets(targets: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for target in targets:
        if target and target not in seen:
            seen[target] = None
    return list(seen.keys())


def extract_outgoing_links(text: str | None) -> list[str]:
    """Unique link targets of a note body, ready to store as `outgoing_links`."""
    return dedupe_targets([link.target_title for link in parse_links(text)])


def rewrite_links(text: str | None, old_title: str, new_title: str) -> str:
    """Point every link to `old_title` at `new_title`, keeping aliases."""
    if not text or not old_title or old_title == new_title:
        return text or ""

    def _replace(match: re.Match) -> str:
        return f"[[{new_title}{match.group(1) or ''}]]"

    rewritten, count = _rename_pattern(old_title).subn(_replace, text)
    if count:
        logger.debug("Rewrote %d link(s) from '%s' to '%s'", count, old_title, new_title)
    return rewritten
