"""Public runtime orchestration entry points.

Groups the interactive selection session and the confirmation prompt used by
the application flow.
"""

from __future__ import annotations


def run_selection_session(*args, **kwargs):
    """Lazily import the session runner to avoid package-import cycles."""
    from .loop import run_selection_session as _run_selection_session

    return _run_selection_session(*args, **kwargs)


def run_confirmation_prompt(*args, **kwargs):
    """Lazily import the confirm prompt to avoid package-import cycles."""
    from .loop import run_confirmation_prompt as _run_confirmation_prompt

    return _run_confirmation_prompt(*args, **kwargs)


__all__ = [
    "run_selection_session",
    "run_confirmation_prompt",
]
