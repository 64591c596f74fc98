"""Client-side session logic, independent of any UI toolkit.

Responsibilities:
    - Selection set, transcript and cached file pages
    - The search-then-generate question cycle
    - Answer formatting for display
"""

from docchat.session.flow import QuestionFlow, build_context
from docchat.session.state import CyclePhase, FileCatalog, SelectionSet, SessionState, Transcript

__all__ = [
    "CyclePhase",
    "FileCatalog",
    "QuestionFlow",
    "SelectionSet",
    "SessionState",
    "Transcript",
    "build_context",
]
