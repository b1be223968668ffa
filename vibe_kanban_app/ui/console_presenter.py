"""Terminal rendering of the first-run dialogs."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from vibe_kanban_app.core.constants import ActiveDialog, EditorType, ExecutorType
from vibe_kanban_app.core.dataclasses_config import EditorConfig, ExecutorConfig, OnboardingResult
from vibe_kanban_app.core.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from vibe_kanban_app.ui.protocols import DialogCompletion

logger = logging.getLogger(__name__)

DISCLAIMER_TEXT = """\
Important: safety notice

Vibe Kanban runs coding agents on your machine. Agents can read and modify
files, run commands and reach the network without asking for each action.
Review what they produce, keep your work under version control and only
point them at repositories you are prepared to have changed.
"""

ACCEPT_ANSWERS = frozenset({"accept", "a", "yes", "y"})


class ConsoleDialogPresenter:
    """
    Renders dialogs as prompts on stdin/stdout.

    End of input (Ctrl-D) or an interrupt at a prompt abandons the first-run
    flow; ``wait_abandoned`` returns once that happens.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output
        self._tasks: dict[ActiveDialog, asyncio.Task[None]] = {}
        self._abandoned = asyncio.Event()

    @property
    def abandoned(self) -> bool:
        return self._abandoned.is_set()

    async def wait_abandoned(self) -> None:
        """Wait until the user leaves the flow without completing it."""
        await self._abandoned.wait()

    def render(self, dialog: ActiveDialog, open: bool, on_complete: DialogCompletion | None) -> None:
        logger.debug("Rendering %s dialog (open=%s)", dialog, open)
        task = self._tasks.pop(dialog, None)
        # A prompt that just completed the dialog is the task being dismissed
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

        if not open or on_complete is None or self.abandoned:
            return

        if dialog == ActiveDialog.DISCLAIMER:
            task = asyncio.create_task(self._run_disclaimer(on_complete))
        elif dialog == ActiveDialog.ONBOARDING:
            task = asyncio.create_task(self._run_onboarding(on_complete))
        else:
            return
        task.add_done_callback(self._on_prompt_done)
        self._tasks[dialog] = task

    def _on_prompt_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Dialog prompt failed: %s", error, exc_info=error)
            self._abandon("prompt failed")

    def _abandon(self, reason: str) -> None:
        if not self.abandoned:
            logger.warning("First-run flow abandoned: %s", reason)
            self._abandoned.set()

    async def _ask(self, prompt: str) -> str | None:
        """
        Read one answer.

        Returns:
            The stripped answer, or None if input ended or was interrupted.

        """
        try:
            answer = await self._read_line(prompt)
        except EOFError:
            self._abandon("end of input")
            return None
        except KeyboardInterrupt:
            self._abandon("interrupted")
            return None
        return answer.strip()

    async def _read_line(self, prompt: str) -> str:
        # Daemon thread: a prompt still waiting on stdin must not block loop shutdown
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def deliver(setter: Callable[[Any], None], value: Any) -> None:
            if not future.done():
                setter(value)

        def read() -> None:
            try:
                answer = self._input(prompt)
            except BaseException as e:
                callback, value = future.set_exception, e
            else:
                callback, value = future.set_result, answer
            try:
                loop.call_soon_threadsafe(deliver, callback, value)
            except RuntimeError:
                logger.debug("Event loop closed before input arrived")

        threading.Thread(target=read, name="console-input", daemon=True).start()
        return await future

    async def _run_disclaimer(self, on_complete: DialogCompletion) -> None:
        self._output(DISCLAIMER_TEXT)
        while True:
            answer = await self._ask("Type 'accept' to continue: ")
            if answer is None:
                return
            if answer.lower() in ACCEPT_ANSWERS:
                on_complete()
                return
            self._output("The safety notice must be accepted before Vibe Kanban can be used.")

    async def _run_onboarding(self, on_complete: DialogCompletion) -> None:
        self._output("Welcome to Vibe Kanban. Pick your defaults; both can be changed later in settings.")
        while True:
            executor_type = await self._choose("Coding agent", list(ExecutorType), ExecutorType.get_default())
            if executor_type is None:
                return
            editor_type = await self._choose("Editor", list(EditorType), EditorType.get_default())
            if editor_type is None:
                return
            custom_command = None
            if editor_type == EditorType.CUSTOM:
                answer = await self._ask("Command to launch your editor: ")
                if answer is None:
                    return
                custom_command = answer or None

            try:
                result = OnboardingResult(
                    executor=ExecutorConfig(type=executor_type),
                    editor=EditorConfig(editor_type=editor_type, custom_command=custom_command),
                )
            except ConfigValidationError as e:
                self._output(f"Invalid choice: {e.message}")
                continue

            on_complete(result)
            return

    async def _choose(self, label: str, options: Sequence[str], default: str) -> str | None:
        for index, option in enumerate(options, start=1):
            marker = " (default)" if option == default else ""
            self._output(f"  {index}. {option}{marker}")
        while True:
            answer = await self._ask(f"{label} [1-{len(options)}]: ")
            if answer is None:
                return None
            if not answer:
                return default
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1]
            matches = [option for option in options if option == answer.lower()]
            if matches:
                return matches[0]
            self._output(f"Please enter a number between 1 and {len(options)}.")
