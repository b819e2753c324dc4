"""Event formatters for gitlab-slack.

Each formatter declares the ``object_kind`` it handles through its
``kind`` attribute and is registered in a :class:`HandlerRegistry`.
"""

from gitlab_slack.handlers.merge_request import MergeRequestFormatter
from gitlab_slack.handlers.registry import Formatter, FormatResult, HandlerRegistry


def default_registry(gitlab_base_url: str) -> HandlerRegistry:
    """Build a registry with every built-in formatter."""
    return HandlerRegistry([
        MergeRequestFormatter(gitlab_base_url),
    ])


__all__ = [
    "FormatResult",
    "Formatter",
    "HandlerRegistry",
    "MergeRequestFormatter",
    "default_registry",
]
