"""
Ticket link extraction and rendering.

Finds JIRA ticket identifiers in a pull request title and renders the
markdown block written into the pull request description.
"""

import re
from typing import List, Sequence

# Three-letter project key with a number (ABC-123) or a bare six-digit ticket.
# ASCII letters and digits only; any Unicode word character next to one
# glues it into a longer word.
TICKET_PATTERN = re.compile(r"\b(?:[A-Za-z]{3}-[0-9]+|[0-9]{6})\b")

DEFAULT_BASE_URL = "https://jira.atlassian.com/browse/"
DEFAULT_REMINDER = (
    "Please add a JIRA ticket reference to the pull request title "
    "(for example `ABC-123: commit description`) so it can be linked here."
)
DEFAULT_PLACEHOLDER_TITLE = "example(JIRA-ID): commit description"


def extract_identifiers(title: str) -> List[str]:
    """
    Return ticket identifiers in the order they appear in `title`.

    Matches do not overlap and duplicates are kept.
    """
    if not title:
        return []
    return [match.group(0) for match in TICKET_PATTERN.finditer(title)]


def render_link_block(
    identifiers: Sequence[str],
    base_url: str = DEFAULT_BASE_URL,
    reminder: str = DEFAULT_REMINDER,
) -> str:
    """
    Render the pull request description for the given identifiers.

    Args:
        identifiers: Ticket identifiers, in title order
        base_url: Issue tracker URL the identifier is appended to
        reminder: Text used when no identifier was found

    Returns:
        One `[View related JIRA task (i/N)](url)` link per identifier,
        separated by a blank line, or the reminder.
    """
    if not identifiers:
        return reminder

    total = len(identifiers)
    links = [
        f"[View related JIRA task ({position}/{total})]({base_url}{identifier})"
        for position, identifier in enumerate(identifiers, start=1)
    ]
    return "\n\n".join(links)


def build_title(
    title: str,
    identifiers: Sequence[str],
    placeholder: str = DEFAULT_PLACEHOLDER_TITLE,
) -> str:
    """Keep the title when it references a ticket, otherwise use the placeholder."""
    return title if identifiers else placeholder
