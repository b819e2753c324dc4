"""Relay audit log — append-only JSON Lines with size-based rotation."""

from __future__ import annotations

import fcntl
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from gitlab_slack.models import AuditEvent


class AuditLogger:
    """Records the outcome of every handled webhook, one JSON object per line.

    A line that would push the current file past ``max_bytes`` goes to a
    fresh file; older files shift to ``<name>.1`` ... ``<name>.<backup_count>``.
    """

    def __init__(
        self,
        log_path: str,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
    ) -> None:
        self.log_path = Path(log_path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count

    @classmethod
    def from_env(cls, log_path: str) -> AuditLogger:
        return cls(
            log_path=log_path,
            max_bytes=int(os.environ.get("AUDIT_LOG_MAX_BYTES", "10485760")),
            backup_count=int(os.environ.get("AUDIT_LOG_BACKUP_COUNT", "5")),
        )

    def log(self, event: AuditEvent) -> None:
        record = (event.model_dump_json(exclude_none=True) + "\n").encode()
        with self._exclusive():
            if self._needs_rollover(len(record)):
                self._rollover()
            with self.log_path.open("ab") as f:
                f.write(record)

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = self.log_path.with_name(f".{self.log_path.name}.lock")
        with lock_path.open("w") as lock:
            fcntl.flock(lock, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock, fcntl.LOCK_UN)

    def _needs_rollover(self, incoming: int) -> bool:
        try:
            size = self.log_path.stat().st_size
        except FileNotFoundError:
            return False
        return size > 0 and size + incoming > self._max_bytes

    def _rollover(self) -> None:
        generations = [self.log_path] + [
            self.log_path.with_name(f"{self.log_path.name}.{i}")
            for i in range(1, self._backup_count + 1)
        ]
        generations[-1].unlink(missing_ok=True)
        for newer, older in zip(reversed(generations[:-1]), reversed(generations[1:])):
            if newer.exists():
                newer.rename(older)
