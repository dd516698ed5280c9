from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class FrameError:
    ts: float
    context: str
    message: str
    tb: str | None
    count: int = 1

    def summary_line(self) -> str:
        line = f"{self.context}: {self.message}".strip()
        if self.count > 1:
            line += f" (x{self.count})"
        return line


class ErrorLog:
    """
    Bounded feed of per-frame failures from the camera task.

    A collaborator that throws every frame (bad probe, broken vehicle source)
    collapses into one entry with a repeat count instead of flooding the log.
    """

    def __init__(self, *, max_items: int = 30, persist_path: Path | None = None) -> None:
        self.enabled = True
        self._max_items = max(1, int(max_items))
        self._items: list[FrameError] = []
        self._last_key: tuple[str, str] | None = None
        self._persist_path = Path(persist_path) if persist_path is not None else None

    def items(self) -> list[FrameError]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()
        self._last_key = None

    def log_message(self, *, context: str, message: str) -> None:
        if not self.enabled:
            return
        ctx = str(context or "unknown")
        msg = str(message or "").strip() or "Unknown error"
        if self._append(context=ctx, message=msg, tb=None):
            logger.error("%s: %s", ctx, msg)
            self._persist(context=ctx, message=msg, tb=None)

    def log_exception(self, *, context: str, exc: BaseException) -> None:
        if not self.enabled:
            return
        ctx = str(context or "unknown")
        msg = f"{type(exc).__name__}: {exc}".strip()
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        if self._append(context=ctx, message=msg, tb=tb):
            logger.error("%s: %s\n%s", ctx, msg, tb.rstrip())
            self._persist(context=ctx, message=msg, tb=tb)

    def _append(self, *, context: str, message: str, tb: str | None) -> bool:
        """Record an entry; False when it only bumped the repeat count of the last one."""

        now = time.time()
        key = (context, message)
        if self._items and self._last_key == key:
            self._items[-1].ts = now
            self._items[-1].count += 1
            return False

        self._items.append(FrameError(ts=now, context=context, message=message, tb=tb))
        self._last_key = key
        if len(self._items) > self._max_items:
            self._items = self._items[-self._max_items :]
        return True

    def _persist(self, *, context: str, message: str, tb: str | None) -> None:
        p = self._persist_path
        if p is None:
            return
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
            lines = [f"[{stamp}] {context}: {message}"]
            if tb and tb.strip():
                lines.append(tb.rstrip())
            lines.append("")
            with p.open("a", encoding="utf-8") as fh:
                fh.write("\n".join(lines))
        except OSError:
            logger.warning("could not persist camera error to %s", p, exc_info=True)
