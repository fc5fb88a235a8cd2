"""
Review session: the run-list store for one review thread.

Three sources feed the session: the live progress subscription, the
persisted run poll, and user actions (loading a diff, changing scope,
starting or cancelling a run). Every update computes the next run list with
a pure function and assigns it in one step, with no ``await`` in between, so
concurrent handlers on the event loop never observe a half-applied update.
"""

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING

from rovex.channel import EventChannel
from rovex.exceptions import RovexError
from rovex.logging import get_logger
from rovex.reducer import (
    acknowledge_optimistic_run,
    apply_progress_event,
    create_optimistic_review_run,
    fail_optimistic_run,
    find_run,
    is_terminal_transition,
    mark_run_canceled,
)
from rovex.scope import (
    build_scoped_diff,
    create_full_review_scope,
    resolve_scope_for_patch,
    scope_exists_in_patch,
)
from rovex.status import CANCELED, DESCRIPTION_DELTA, FAILED
from rovex.sync import has_active_review_runs, merge_persisted_review_runs
from rovex.types.diff import CompareWorkspaceDiffResult, ReviewScope, ScopedDiffResult
from rovex.types.runs import ProgressEvent, ReviewRun, StartReviewRunInput
from rovex.types.threads import ThreadMessage

if TYPE_CHECKING:
    from rovex.async_client import AsyncRovexClient

logger = get_logger("runs")

RunsListener = Callable[[list[ReviewRun]], None]


class ReviewSession:
    """
    Client-side state of the review runs of one thread.

    Example:
        ```python
        async with AsyncRovexClient(base_url="http://127.0.0.1:8787") as client:
            session = ReviewSession(client, thread_id=1)
            session.load_comparison(WorkspaceGit().compare("./repo", "origin/main"))
            await session.listen()
            await session.start_review(scope=FileScope("src/app.py"))
            ...
            await session.close()
        ```
    """

    def __init__(self, client: "AsyncRovexClient", thread_id: int | None = None) -> None:
        """
        Initialize the session.

        Args:
            client: Async backend client (or a compatible mock)
            thread_id: Review thread to track (optional, see ``select_thread``)
        """
        self.client = client
        self.thread_id = thread_id
        self.runs: list[ReviewRun] = []
        self.selected_run_id: str | None = None
        self.scope: ReviewScope = create_full_review_scope()
        self.comparison: CompareWorkspaceDiffResult | None = None
        self.messages: list[ThreadMessage] = []
        self.status_message: str | None = None
        self.error: str | None = None

        self._listeners: list[RunsListener] = []
        self._channel: EventChannel[ProgressEvent] | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._listen_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Run list publication
    # ------------------------------------------------------------------

    def add_listener(self, listener: RunsListener) -> Callable[[], None]:
        """
        Register a callback invoked with the run list after every change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set_runs(self, runs: list[ReviewRun]) -> None:
        self.runs = runs
        for listener in list(self._listeners):
            listener(runs)

    @property
    def selected_run(self) -> ReviewRun | None:
        return find_run(self.runs, self.selected_run_id)

    @property
    def has_active_runs(self) -> bool:
        return has_active_review_runs(self.runs)

    # ------------------------------------------------------------------
    # Thread, diff and scope
    # ------------------------------------------------------------------

    async def select_thread(self, thread_id: int | None) -> None:
        """Switch to another thread, dropping the subscription and all state."""
        await self.stop_listening()
        self.thread_id = thread_id
        self.comparison = None
        self.scope = create_full_review_scope()
        self.messages = []
        self.selected_run_id = None
        self.status_message = None
        self.error = None
        self._set_runs([])

    def load_comparison(self, comparison: CompareWorkspaceDiffResult) -> None:
        """Use a new workspace comparison; a scope it no longer contains resets to full."""
        self.comparison = comparison
        self.scope = resolve_scope_for_patch(self.scope, comparison.diff)

    def set_scope(self, scope: ReviewScope) -> ReviewScope:
        """
        Change the active scope.

        Returns:
            The scope in effect: ``scope``, or the full scope when the loaded
            diff does not contain it
        """
        if self.comparison is not None and not scope_exists_in_patch(scope, self.comparison.diff):
            scope = create_full_review_scope()
        self.scope = scope
        return scope

    def scoped_diff(self, scope: ReviewScope | None = None) -> ScopedDiffResult | None:
        """Build the diff slice for ``scope`` (default: the active scope)."""
        if self.comparison is None:
            return None
        return build_scoped_diff(self.comparison.diff, scope or self.scope)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def start_review(
        self,
        prompt: str | None = None,
        scope: ReviewScope | None = None,
    ) -> str | None:
        """
        Start a review run on a scope of the loaded diff.

        A queued placeholder run is shown immediately and replaced by the
        backend run id once the start is acknowledged. A rejected start marks
        the placeholder as failed.

        Args:
            prompt: Optional extra instructions for the reviewer
            scope: Scope to review (default: the active scope)

        Returns:
            The backend run id, or None if the run could not be started
            (see ``error``)
        """
        self.error = None
        self.status_message = None

        if self.thread_id is None:
            self.error = "Select a review before running AI."
            return None
        if self.comparison is None:
            self.error = "Load a diff before running AI review."
            return None

        scope = scope or self.scope
        scoped = build_scoped_diff(self.comparison.diff, scope)
        if scoped is None:
            self.error = "No changes found in the selected scope."
            return None

        placeholder = create_optimistic_review_run(scope)
        self._set_runs([placeholder, *self.runs])
        self.selected_run_id = placeholder.id
        self.scope = scope
        label = placeholder.scope_label
        self.status_message = f"Queueing review on {label}..."

        run_input = StartReviewRunInput(
            thread_id=self.thread_id,
            workspace=self.comparison.workspace,
            base_ref=self.comparison.base_ref,
            merge_base=self.comparison.merge_base,
            head=self.comparison.head,
            files_changed=scoped.files_changed,
            insertions=scoped.insertions,
            deletions=scoped.deletions,
            diff=scoped.diff,
            prompt=(prompt or "").strip() or None,
            scope_label=label,
        )
        try:
            result = await self.client.runs.start(run_input)
        except RovexError as e:
            logger.warning("Starting review on %s failed: %s", label, e)
            self.error = e.message
            self._set_runs(fail_optimistic_run(self.runs, placeholder.id, e.message))
            return None

        self._set_runs(acknowledge_optimistic_run(self.runs, placeholder.id, result))
        if self.selected_run_id == placeholder.id:
            self.selected_run_id = result.run_id
        self.status_message = f"Review queued on {label}."
        await self.refresh()
        return result.run_id

    async def cancel_run(self, run_id: str) -> bool:
        """
        Ask the backend to cancel a run.

        Returns:
            True if the backend accepted the cancel request
        """
        run_id = run_id.strip()
        if not run_id:
            return False

        try:
            result = await self.client.runs.cancel(run_id)
        except RovexError as e:
            logger.warning("Canceling run %s failed: %s", run_id, e)
            self.error = e.message
            return False

        self._set_runs(mark_run_canceled(self.runs, run_id, result))
        if result.canceled:
            self.status_message = (
                "Review run canceled."
                if result.status == CANCELED
                else "Cancel request sent for running review."
            )
        await self.refresh()
        return result.canceled

    # ------------------------------------------------------------------
    # Poll
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Fetch the persisted runs and merge them into the local run list."""
        thread_id = self.thread_id
        if thread_id is None:
            return
        try:
            persisted = await self.client.runs.list(thread_id)
        except RovexError as e:
            logger.warning("Refreshing runs of thread %s failed: %s", thread_id, e)
            self.error = e.message
            return
        if self.thread_id != thread_id:
            # Thread changed while the request was in flight
            return
        self._set_runs(merge_persisted_review_runs(self.runs, persisted))

    async def refresh_messages(self) -> None:
        """Fetch the thread messages (the final review is posted there)."""
        thread_id = self.thread_id
        if thread_id is None:
            return
        try:
            messages = await self.client.threads.list_messages(thread_id)
        except RovexError as e:
            logger.warning("Refreshing messages of thread %s failed: %s", thread_id, e)
            return
        if self.thread_id == thread_id:
            self.messages = messages

    # ------------------------------------------------------------------
    # Live subscription
    # ------------------------------------------------------------------

    def apply_event(self, event: ProgressEvent) -> bool:
        """
        Apply one live progress event.

        Events of other threads are ignored.

        Returns:
            True when the event moved a run into a terminal status; the caller
            should then refresh runs and messages
        """
        if self.thread_id is not None and event.thread_id != self.thread_id:
            return False

        before = self.runs
        after = apply_progress_event(before, event, fallback_run_id=self.selected_run_id)
        self._set_runs(after)

        if event.status == FAILED:
            self.error = event.message or self.error
        elif event.status != DESCRIPTION_DELTA and event.message:
            self.status_message = event.message

        return is_terminal_transition(before, after, (event.run_id or "").strip() or None)

    async def consume(self) -> None:
        """
        Consume the live subscription until it ends or is stopped.

        Events are pumped into an ``EventChannel`` and applied one at a time.
        A terminal transition triggers a refresh of runs and messages.
        """
        thread_id = self.thread_id
        if thread_id is None:
            return

        channel: EventChannel[ProgressEvent] = EventChannel()
        self._channel = channel
        pump = asyncio.create_task(self._pump(thread_id, channel))
        self._pump_task = pump
        try:
            async for event in channel:
                if self.apply_event(event):
                    await self.refresh()
                    await self.refresh_messages()
        finally:
            pump.cancel()
            (outcome,) = await asyncio.gather(pump, return_exceptions=True)
            if isinstance(outcome, Exception):
                logger.warning(
                    "Progress subscription for thread %s failed: %r", thread_id, outcome
                )
            if self._channel is channel:
                self._channel = None
                self._pump_task = None

    async def _pump(self, thread_id: int, channel: EventChannel[ProgressEvent]) -> None:
        try:
            async for event in self.client.runs.subscribe(thread_id):
                if not channel.send(event):
                    break
        except RovexError as e:
            logger.warning("Progress subscription for thread %s ended: %s", thread_id, e)
        finally:
            channel.close()

    async def listen(self) -> None:
        """Start consuming the live subscription in a background task."""
        await self.stop_listening()
        self._listen_task = asyncio.create_task(self.consume())

    async def stop_listening(self) -> None:
        """Tear down the live subscription; queued events are discarded."""
        task = self._listen_task
        self._listen_task = None
        if self._channel is not None:
            self._channel.close()
        if self._pump_task is not None:
            self._pump_task.cancel()
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def close(self) -> None:
        """Dispose of the session."""
        await self.stop_listening()
