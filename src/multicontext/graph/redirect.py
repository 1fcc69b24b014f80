"""Subheading selection and the empty-derived-context redirect.

When a path is not top-level and its only derived subheading has no
children, there is nothing to render. What happens then is a policy the
application chooses: navigate to the bare signifier, render the empty
branch anyway, or raise.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from multicontext.graph.queries import (
    ROOT,
    Path,
    derived_children_of,
    has_children,
    has_intersections,
    signifier,
    sort_paths_by_display,
    sort_to_front,
)
from multicontext.models.state import GraphState
from multicontext.services.exceptions import EmptyContextError
from multicontext.utils.logging import get_logger


logger = get_logger(__name__)


class RedirectPolicy(str, Enum):
    """What to do when a focus resolves to a single empty subheading."""

    REDIRECT = "redirect"
    IGNORE = "ignore"
    ERROR = "error"


@dataclass(frozen=True)
class ContextView:
    """Resolved view of a focus path.

    Attributes:
        focus: The requested path
        subheadings: Paths to render as headings, in display order
        direct: True when the focus has direct children (subheadings == [focus])
        redirect_to: Bare signifier path to navigate to instead, or None
    """

    focus: Path
    subheadings: tuple[Path, ...]
    direct: bool
    redirect_to: Optional[Path] = None


def subheadings_for(
    state: GraphState,
    focus: Sequence[str],
    from_path: Optional[Sequence[str]] = None,
    root: str = ROOT,
) -> list[Path]:
    """Headings to show for a focus.

    The focus itself when it has direct children; otherwise its derived
    children sorted by display text, with from_path + focus first when a
    breadcrumb is given.
    """
    focus = tuple(focus)
    if has_children(state, focus):
        return [focus]
    # every context of the signifier, including the one the focus is viewed from
    derived = sort_paths_by_display(derived_children_of(state, (signifier(focus),), root))
    if from_path:
        return sort_to_front(tuple(from_path) + focus, derived)
    return derived


def is_empty_subheadings(
    state: GraphState,
    focus: Sequence[str],
    subheadings: Sequence[Sequence[str]],
) -> bool:
    return (
        has_intersections(focus)
        and len(subheadings) == 1
        and not has_children(state, subheadings[0])
    )


def resolve_view(
    state: GraphState,
    focus: Sequence[str],
    from_path: Optional[Sequence[str]] = None,
    policy: RedirectPolicy = RedirectPolicy.REDIRECT,
    root: str = ROOT,
) -> ContextView:
    """Work out what a focus path should display.

    Args:
        state: Graph state to read
        focus: Path being viewed
        from_path: Optional breadcrumb the user navigated from (not validated)
        policy: Behaviour for a single empty derived subheading
        root: Value of the root item

    Returns:
        ContextView; redirect_to is set only under the redirect policy

    Raises:
        NotFoundError: If the focus signifier does not exist
        EmptyContextError: Under the error policy, for an empty subheading
    """
    focus = tuple(focus)
    direct = has_children(state, focus)
    subheadings = subheadings_for(state, focus, from_path, root)

    redirect_to = None
    if is_empty_subheadings(state, focus, subheadings):
        bare = (signifier(focus),)
        policy = RedirectPolicy(policy)
        if policy is RedirectPolicy.ERROR:
            raise EmptyContextError(focus, bare)
        if policy is RedirectPolicy.REDIRECT:
            logger.warning("empty_subheadings_redirect", focus=list(focus), redirect_to=list(bare))
            redirect_to = bare

    return ContextView(
        focus=focus,
        subheadings=tuple(subheadings),
        direct=direct,
        redirect_to=redirect_to,
    )
