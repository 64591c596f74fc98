"""Search-then-generate cycle for one submitted question.

Phases: idle -> searching -> (search_failed -> idle)
                          | (generating -> (generate_failed -> idle)
                                         | (done -> idle))

Upstream failures never escape ``QuestionFlow.submit``; they end up as a
``system-error`` transcript entry with a fixed user-readable message,
while the diagnostic detail goes to the log.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from docchat.errors import CycleInProgress, GatewayError, InvalidInput
from docchat.models.schemas import ContextChunk, Role, TranscriptEntry
from docchat.session.formatting import format_response
from docchat.session.state import CyclePhase, SessionState

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3

SEARCH_FAILED_MESSAGE = "Sorry, I couldn't search your documents. Please try again."
GENERATION_FAILED_MESSAGE = (
    "Sorry, I encountered an error processing your question. Please try again."
)


class QuestionBackend(Protocol):
    """What the flow needs: a scoped search and a grounded answer."""

    async def search(self, query: str, file_ids: list[str], k: int = 3) -> list[ContextChunk]: ...

    async def ask(self, question: str, context: str) -> str: ...


def build_context(chunks: Sequence[ContextChunk]) -> str:
    """Join chunk texts in rank order, separated by a blank line."""
    return "\n\n".join(chunk.content for chunk in sorted(chunks, key=lambda c: c.rank))


class QuestionFlow:
    """Runs question/answer cycles against a backend.

    Args:
        backend: Search and answer provider (ApiClient or RequestGateway).
        k: Number of chunks to retrieve per question.
        on_phase: Optional callback invoked on every phase change.
    """

    def __init__(
        self,
        backend: QuestionBackend,
        k: int = DEFAULT_TOP_K,
        on_phase: Callable[[CyclePhase], None] | None = None,
    ) -> None:
        self._backend = backend
        self._k = k
        self._on_phase = on_phase

    def _enter(self, state: SessionState, phase: CyclePhase) -> None:
        state.phase = phase
        if self._on_phase is not None:
            self._on_phase(phase)

    async def submit(self, state: SessionState, question: str) -> list[TranscriptEntry]:
        """Answer one question about the selected files.

        Args:
            state: The session whose selection scopes the search and whose
                transcript receives the result.
            question: The user's question.

        Returns:
            The transcript entries appended by this cycle.

        Raises:
            CycleInProgress: Another cycle of this session is still running.
            InvalidInput: Blank question or empty selection; nothing was sent.
        """
        if state.is_busy:
            raise CycleInProgress("Please wait for the current answer to finish")
        question = question.strip()
        if not question:
            raise InvalidInput("Enter a question first")
        if not state.selection:
            raise InvalidInput("Select at least one document first")

        file_ids = state.selection.ids
        try:
            self._enter(state, CyclePhase.SEARCHING)
            try:
                chunks = await self._backend.search(question, file_ids, self._k)
            except GatewayError as e:
                logger.error(f"Search failed ({e.kind.value}): {e.message} {e.details!r}")
                entries = [state.transcript.append(Role.SYSTEM_ERROR, SEARCH_FAILED_MESSAGE)]
                self._enter(state, CyclePhase.SEARCH_FAILED)
                return entries

            context = build_context(chunks)
            logger.info(f"Retrieved {len(chunks)} chunks from {len(file_ids)} files")

            self._enter(state, CyclePhase.GENERATING)
            try:
                answer = await self._backend.ask(question, context)
            except GatewayError as e:
                logger.error(f"Generation failed ({e.kind.value}): {e.message} {e.details!r}")
                entries = [
                    state.transcript.append(Role.USER, question),
                    state.transcript.append(Role.SYSTEM_ERROR, GENERATION_FAILED_MESSAGE),
                ]
                self._enter(state, CyclePhase.GENERATE_FAILED)
                return entries

            entries = [
                state.transcript.append(Role.USER, question),
                state.transcript.append(Role.ASSISTANT, format_response(answer)),
            ]
            self._enter(state, CyclePhase.DONE)
            return entries
        finally:
            self._enter(state, CyclePhase.IDLE)
