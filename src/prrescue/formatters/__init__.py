from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .json_fmt import format_json
from .markdown_fmt import format_neglected, format_rescuers, format_reviewers

REPORTS = ("reviewers", "rescuers", "neglected")

_MARKDOWN = {
    "reviewers": format_reviewers,
    "rescuers": format_rescuers,
    "neglected": format_neglected,
}


def get_formatter(fmt: str, report: str, **kwargs: Any) -> Callable[[list[Any]], str]:
    if report not in _MARKDOWN:
        raise ValueError(f"Unknown report: {report!r}")
    if fmt == "json":
        return format_json
    if fmt == "markdown":
        owner_repo = kwargs.get("owner_repo", "")
        render = _MARKDOWN[report]
        return lambda rows: render(rows, owner_repo=owner_repo)
    raise ValueError(f"Unknown format: {fmt!r}")
