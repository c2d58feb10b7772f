"""Hook management for session lifecycle events."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

SessionHook = Callable[..., Awaitable[None] | None]


class HookManager:
    """Manages registration and firing of lifecycle hooks.

    Hooks may be plain callables or coroutine functions. Firing never blocks:
    coroutine hooks are scheduled as retained background tasks and their
    failures are logged, never propagated to whoever fired the event.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, list[SessionHook]] = {}
        # Retained background tasks to prevent premature GC.
        self._hook_tasks: set[asyncio.Task[Any]] = set()

    def register(self, event: str, hook: SessionHook) -> Callable[[], None]:
        """Register a hook for ``event``. Hooks are additive.

        Returns:
            A callable that unregisters the hook.
        """
        self._hooks.setdefault(event, []).append(hook)

        def _unregister() -> None:
            hooks = self._hooks.get(event)
            if hooks and hook in hooks:
                hooks.remove(hook)

        return _unregister

    def fire(self, event: str, *args: Any) -> int:
        """Invoke every hook registered for ``event``.

        Returns:
            Number of hooks invoked.
        """
        hooks = list(self._hooks.get(event) or [])
        for hook in hooks:
            try:
                result = hook(*args)
            except Exception as e:  # noqa: BLE001
                logging.warning(
                    f"⚠️ Hook error event={event} type={type(e).__name__} error={str(e)}"
                )
                continue
            if inspect.isawaitable(result):
                self._create_retained_task(result, category=event)
        return len(hooks)

    @property
    def pending_tasks(self) -> int:
        return len(self._hook_tasks)

    async def wait_idle(self) -> None:
        """Wait until every scheduled hook task has finished."""
        while self._hook_tasks:
            await asyncio.gather(*list(self._hook_tasks), return_exceptions=True)

    def _create_retained_task(self, aw: Awaitable[Any], *, category: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(aw):
                aw.close()
            logging.warning(f"⚠️ Hook skipped (no running event loop) category={category}")
            return
        task: asyncio.Task[Any] = loop.create_task(self._run(aw))  # NOSONAR S7502
        self._hook_tasks.add(task)

        def _cb(t: asyncio.Task[Any]) -> None:  # noqa: D401
            self._hook_tasks.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc:
                logging.warning(
                    f"⚠️ Retained hook task error category={category} "
                    f"error={str(exc)} type={type(exc).__name__}"
                )

        task.add_done_callback(_cb)

    @staticmethod
    async def _run(aw: Awaitable[Any]) -> Any:
        return await aw
