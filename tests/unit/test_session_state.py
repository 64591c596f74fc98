"""Unit tests for session view state."""

import pytest
import pytest_check as check

from docchat.models.schemas import DocumentReference, Role
from docchat.session.state import (
    CyclePhase,
    FileCatalog,
    SelectionSet,
    SessionState,
    Transcript,
)


def ref(file_id: str, file_name: str | None = None) -> DocumentReference:
    return DocumentReference(file_id=file_id, file_name=file_name or f"{file_id}.pdf")


class TestSelectionSet:
    def test_toggle_adds_then_removes(self) -> None:
        selection = SelectionSet()

        assert selection.toggle("a") is True
        assert "a" in selection
        assert selection.toggle("a") is False
        assert "a" not in selection

    def test_keeps_selection_order(self) -> None:
        selection = SelectionSet()
        for file_id in ("c", "a", "b"):
            selection.toggle(file_id)

        assert selection.ids == ["c", "a", "b"]

    def test_add_is_idempotent(self) -> None:
        """Uploads append to the selection without duplicating ids."""
        selection = SelectionSet()
        selection.add("a")
        selection.add("a")

        assert selection.ids == ["a"]

    def test_clear(self) -> None:
        selection = SelectionSet()
        selection.add("a")
        selection.clear()

        assert len(selection) == 0
        assert not selection

    def test_ids_is_a_copy(self) -> None:
        selection = SelectionSet()
        selection.add("a")
        selection.ids.append("b")

        assert selection.ids == ["a"]


class TestTranscript:
    def test_append_only_in_order(self) -> None:
        transcript = Transcript()
        transcript.append(Role.USER, "question")
        transcript.append(Role.ASSISTANT, "answer")

        assert [(e.role, e.content) for e in transcript.entries] == [
            (Role.USER, "question"),
            (Role.ASSISTANT, "answer"),
        ]

    def test_entries_are_read_only(self) -> None:
        transcript = Transcript()
        transcript.append(Role.USER, "q")

        assert isinstance(transcript.entries, tuple)
        assert len(transcript) == 1

    def test_entries_carry_display_time(self) -> None:
        entry = Transcript().append(Role.SYSTEM_ERROR, "oops")

        assert entry.role.value == "system-error"
        assert entry.time


class TestFileCatalog:
    """Tests for page merging and deduplication."""

    def test_rejects_non_positive_page_size(self) -> None:
        with pytest.raises(ValueError):
            FileCatalog(page_size=0)

    def test_overlapping_pages_keep_one_entry_per_id(self) -> None:
        """Later copy of an id wins but keeps the original position."""
        catalog = FileCatalog(page_size=2)
        catalog.merge_page([ref("a", "old-name.pdf"), ref("b")])
        catalog.merge_page([ref("a", "new-name.pdf"), ref("c")])

        check.equal([f.file_id for f in catalog.files], ["a", "b", "c"])
        check.equal(catalog.files[0].file_name, "new-name.pdf")
        check.equal(len(catalog), 3)

    def test_duplicates_within_one_page(self) -> None:
        catalog = FileCatalog(page_size=3)
        catalog.refresh([ref("a", "first.pdf"), ref("b"), ref("a", "second.pdf")])

        assert [f.file_id for f in catalog.files] == ["a", "b"]
        assert catalog.files[0].file_name == "second.pdf"

    def test_refresh_replaces_cache_and_resets_cursor(self) -> None:
        catalog = FileCatalog(page_size=2)
        catalog.merge_page([ref("a"), ref("b")])
        catalog.merge_page([ref("c"), ref("d")])
        assert catalog.page == 1

        catalog.refresh([ref("new"), ref("a")])

        assert [f.file_id for f in catalog.files] == ["new", "a"]
        assert catalog.page == 0
        assert catalog.next_offset == 2

    def test_next_offset_advances_per_page(self) -> None:
        catalog = FileCatalog(page_size=10)
        assert catalog.next_offset == 0

        catalog.merge_page([ref(str(i)) for i in range(10)])
        assert catalog.next_offset == 10

        catalog.merge_page([ref(str(i)) for i in range(10, 20)])
        assert catalog.next_offset == 20

    def test_has_more_is_page_size_heuristic(self) -> None:
        catalog = FileCatalog(page_size=2)

        catalog.merge_page([ref("a"), ref("b")])
        assert catalog.has_more is True

        catalog.merge_page([ref("c")])
        assert catalog.has_more is False

        catalog.refresh([])
        assert catalog.has_more is False

    def test_duplicate_names_are_distinguishable(self) -> None:
        """Same name with different ids is flagged and labelled with an id prefix."""
        catalog = FileCatalog()
        catalog.merge_page(
            [
                ref("1234567890", "report.pdf"),
                ref("abcdefghij", "report.pdf"),
                ref("zzz", "other.pdf"),
            ]
        )

        check.is_true(catalog.is_duplicate_name("report.pdf"))
        check.is_false(catalog.is_duplicate_name("other.pdf"))
        check.is_false(catalog.is_duplicate_name(None))
        check.equal(catalog.label(catalog.files[0]), "report.pdf (12345678)")
        check.equal(catalog.label(catalog.files[1]), "report.pdf (abcdefgh)")
        check.equal(catalog.label(catalog.files[2]), "other.pdf")

    def test_label_falls_back_to_id(self) -> None:
        catalog = FileCatalog()
        nameless = DocumentReference(file_id="f-1")
        catalog.merge_page([nameless])

        assert catalog.label(nameless) == "f-1"


class TestSessionState:
    def test_starts_idle(self) -> None:
        state = SessionState()

        assert state.phase is CyclePhase.IDLE
        assert state.is_busy is False

    def test_can_submit_requires_selection_question_and_idle(self) -> None:
        state = SessionState()
        check.is_false(state.can_submit("What?"))

        state.selection.add("f1")
        check.is_true(state.can_submit("What?"))
        check.is_false(state.can_submit("   "))

        state.phase = CyclePhase.SEARCHING
        check.is_false(state.can_submit("What?"))
