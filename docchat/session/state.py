"""Per-session view state: selected files, chat transcript and file catalog.

Everything here lives in memory for one UI session and is passed
explicitly into the question flow.
"""

from collections.abc import Iterable, Iterator
from enum import Enum

from docchat.config import DEFAULT_PAGE_SIZE
from docchat.models.schemas import DocumentReference, Role, TranscriptEntry


class CyclePhase(str, Enum):
    """Phases of one question/answer cycle."""

    IDLE = "idle"
    SEARCHING = "searching"
    SEARCH_FAILED = "search_failed"
    GENERATING = "generating"
    GENERATE_FAILED = "generate_failed"
    DONE = "done"


class SelectionSet:
    """Ordered set of file ids scoping the next question."""

    def __init__(self) -> None:
        self._ids: list[str] = []

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def toggle(self, file_id: str) -> bool:
        """Select or deselect a file.

        Returns:
            True if the file is selected afterwards.
        """
        if file_id in self._ids:
            self._ids.remove(file_id)
            return False
        self._ids.append(file_id)
        return True

    def add(self, file_id: str) -> None:
        if file_id not in self._ids:
            self._ids.append(file_id)

    def clear(self) -> None:
        self._ids.clear()


class Transcript:
    """Append-only list of chat entries."""

    def __init__(self) -> None:
        self._entries: list[TranscriptEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    def append(self, role: Role, content: str) -> TranscriptEntry:
        entry = TranscriptEntry(role=role, content=content)
        self._entries.append(entry)
        return entry


class FileCatalog:
    """Locally cached pages of the document store's file list.

    Pages are merged by ``file_id``: a later copy of an id replaces the
    earlier value but keeps its position, since the upstream list may
    repeat entries across pages.

    ``has_more`` is a heuristic. The upstream gives no total count, so a
    page as large as the requested page size is taken to mean that more
    files may exist. A final page that happens to be exactly full will
    offer one extra, empty, load.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.page_size = page_size
        self.page = 0
        self.has_more = True
        self._files: dict[str, DocumentReference] = {}

    def __len__(self) -> int:
        return len(self._files)

    @property
    def files(self) -> list[DocumentReference]:
        return list(self._files.values())

    @property
    def next_offset(self) -> int:
        """Offset of the page after the ones already loaded."""
        return (self.page + 1) * self.page_size if self._files else 0

    def merge_page(self, page: Iterable[DocumentReference]) -> None:
        """Append a fetched page (Load More)."""
        page = list(page)
        if self._files:
            self.page += 1
        self._merge(page)
        self.has_more = len(page) == self.page_size

    def refresh(self, page: Iterable[DocumentReference]) -> None:
        """Replace the cache with a freshly fetched first page."""
        page = list(page)
        self._files = {}
        self._merge(page)
        self.page = 0
        self.has_more = len(page) == self.page_size

    def _merge(self, page: list[DocumentReference]) -> None:
        for ref in page:
            self._files[ref.file_id] = ref

    def is_duplicate_name(self, file_name: str | None) -> bool:
        if file_name is None:
            return False
        return sum(1 for f in self._files.values() if f.file_name == file_name) > 1

    def label(self, ref: DocumentReference) -> str:
        """Display name, with a short id suffix when the name is shared."""
        name = ref.file_name or ref.file_id
        if self.is_duplicate_name(ref.file_name):
            return f"{name} ({ref.file_id[:8]})"
        return name


class SessionState:
    """All view state of one chat session.

    Attributes:
        selection: Files scoping the next question.
        transcript: Chat history.
        catalog: Cached file list.
        phase: Current question/answer cycle phase.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.selection = SelectionSet()
        self.transcript = Transcript()
        self.catalog = FileCatalog(page_size=page_size)
        self.phase = CyclePhase.IDLE

    @property
    def is_busy(self) -> bool:
        return self.phase is not CyclePhase.IDLE

    def can_submit(self, question: str) -> bool:
        """Whether the ask button should be enabled."""
        return not self.is_busy and bool(self.selection) and bool(question.strip())
