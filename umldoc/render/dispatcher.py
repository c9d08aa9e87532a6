"""Pool of long-lived PlantUML processes rendering markup into images."""

from __future__ import annotations

import os
import re
import subprocess
import threading
from collections import deque
from concurrent.futures import Future
from typing import IO, Callable, Deque, List, Optional, Sequence

from ..logging import get_logger
from .images import ImageFormat

DEFAULT_DELIMITER = "___UMLDOC_DIAGRAM_END___"
JAR_ENV = "PLANTUML_JAR"
_READ_SIZE = 64 * 1024

Spawn = Callable[[Sequence[str]], "subprocess.Popen[bytes]"]

logger = get_logger("render.dispatcher")


class RenderError(RuntimeError):
    """Raised when a render process cannot produce an image."""


def plantuml_command(
    image_format: ImageFormat | str = ImageFormat.SVG,
    *,
    jar_path: str | None = None,
    java: str = "java",
    delimiter: str = DEFAULT_DELIMITER,
) -> List[str]:
    """Command line of a PlantUML process in pipe mode.

    Each diagram read from stdin is answered with the image bytes, the
    delimiter and a line break on stdout.
    """
    jar = jar_path or os.getenv(JAR_ENV) or "plantuml.jar"
    fmt = ImageFormat(image_format).value
    return [
        java,
        "-Djava.awt.headless=true",
        "-jar",
        jar,
        "-pipe",
        f"-t{fmt}",
        "-charset",
        "UTF-8",
        "-pipedelimitor",
        delimiter,
    ]


def _popen(command: Sequence[str]) -> "subprocess.Popen[bytes]":
    return subprocess.Popen(
        list(command),
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )


class ProcessSlot:
    """One render process plus the FIFO of futures waiting for its output.

    The process must answer in the order it was fed. Futures are appended
    and markup is written under the same lock, so the queue order always
    equals the write order.
    """

    def __init__(self, index: int, process: "subprocess.Popen[bytes]", delimiter: str) -> None:
        if process.stdin is None or process.stdout is None:
            raise RenderError("Render processes need piped stdin and stdout")
        self.index = index
        self.process = process
        self._stdin: IO[bytes] = process.stdin
        self._terminator = re.compile(re.escape(delimiter.encode("utf-8")) + rb"\r?\n")
        self._pending: Deque["Future[bytes]"] = deque()
        self._pending_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._failure: Optional[RenderError] = None
        self._input_closed = False

        self._reader = threading.Thread(
            target=self._read_output, name=f"umldoc-render-{index}", daemon=True
        )
        self._reader.start()
        self._stderr_reader: Optional[threading.Thread] = None
        if process.stderr is not None:
            self._stderr_reader = threading.Thread(
                target=self._log_stderr, name=f"umldoc-render-{index}-stderr", daemon=True
            )
            self._stderr_reader.start()

    @property
    def alive(self) -> bool:
        return self._failure is None and not self._input_closed

    @property
    def pending_count(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def submit(self, markup: str) -> "Future[bytes]":
        """Queue a future and write the markup without waiting for earlier jobs."""
        future: "Future[bytes]" = Future()
        future.set_running_or_notify_cancel()
        payload = (markup.rstrip("\n") + "\n").encode("utf-8")

        with self._write_lock:
            with self._pending_lock:
                failure = self._failure
                if failure is None and self._input_closed:
                    failure = RenderError(f"Render process {self.index} no longer accepts input")
                if failure is None:
                    self._pending.append(future)
            if failure is not None:
                future.set_exception(failure)
                return future
            try:
                self._stdin.write(payload)
                self._stdin.flush()
            except (OSError, ValueError) as exc:
                self._abandon(future, RenderError(f"Render process {self.index} rejected input: {exc}"))
        return future

    def close(self) -> None:
        """Close the input stream; the process finishes queued work and exits."""
        with self._write_lock:
            if self._input_closed:
                return
            self._input_closed = True
            try:
                self._stdin.close()
            except OSError as exc:
                logger.debug("Closing stdin of render process %d failed: %s", self.index, exc)

    def wait(self, timeout: float | None = None) -> Optional[int]:
        """Join the reader and reap the process; return its exit code if it ended."""
        self._reader.join(timeout)
        try:
            return self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return None

    def _read_output(self) -> None:
        stream = self.process.stdout
        buffer = b""
        try:
            while True:
                chunk = stream.read1(_READ_SIZE) if hasattr(stream, "read1") else stream.read(_READ_SIZE)
                if not chunk:
                    break
                buffer += chunk
                buffer = self._deliver(buffer)
        except (OSError, ValueError) as exc:
            logger.debug("Reading from render process %d failed: %s", self.index, exc)
        finally:
            code = self.process.poll()
            detail = f"exit code {code}" if code is not None else "output closed"
            self._fail_pending(RenderError(f"Render process {self.index} stopped ({detail})"))

    def _deliver(self, buffer: bytes) -> bytes:
        while True:
            match = self._terminator.search(buffer)
            if match is None:
                return buffer
            image, buffer = buffer[: match.start()], buffer[match.end() :]
            with self._pending_lock:
                future = self._pending.popleft() if self._pending else None
            if future is None:
                logger.warning(
                    "Render process %d produced output nobody was waiting for (%d bytes)",
                    self.index,
                    len(image),
                )
                continue
            future.set_result(image)

    def _fail_pending(self, error: RenderError) -> None:
        with self._pending_lock:
            self._failure = error
            stranded = list(self._pending)
            self._pending.clear()
        if stranded:
            logger.warning("%s with %d diagram(s) pending", error, len(stranded))
        for future in stranded:
            future.set_exception(error)

    def _abandon(self, future: "Future[bytes]", error: RenderError) -> None:
        with self._pending_lock:
            try:
                self._pending.remove(future)
            except ValueError:
                # The reader already failed it.
                return
        future.set_exception(error)

    def _log_stderr(self) -> None:
        stream = self.process.stderr
        try:
            for raw in iter(stream.readline, b""):
                line = raw.decode("utf-8", errors="replace").rstrip()
                if line:
                    logger.debug("render[%d]: %s", self.index, line)
        except (OSError, ValueError):
            return


class RenderDispatcher:
    """Distributes markup over up to ``pool_size`` render processes round robin.

    Processes are started lazily, the first submissions fill the pool before
    any slot is reused. ``submit`` never waits for a render to finish.
    """

    def __init__(
        self,
        pool_size: int,
        image_format: ImageFormat | str = ImageFormat.SVG,
        *,
        command: Sequence[str] | None = None,
        jar_path: str | None = None,
        delimiter: str = DEFAULT_DELIMITER,
        spawn: Spawn | None = None,
    ) -> None:
        if isinstance(pool_size, bool) or not isinstance(pool_size, int) or pool_size <= 0:
            raise ValueError(f"pool_size must be a positive integer, got {pool_size!r}")
        self.pool_size = pool_size
        self.image_format = ImageFormat(image_format)
        self.delimiter = delimiter
        self.command = list(command) if command else plantuml_command(
            self.image_format, jar_path=jar_path, delimiter=delimiter
        )
        self._spawn = spawn or _popen
        self._slots: List[ProcessSlot] = []
        self._counter = 0
        self._lock = threading.Lock()
        self._shut_down = False

    @property
    def slot_count(self) -> int:
        return len(self._slots)

    @property
    def slots(self) -> List[ProcessSlot]:
        return list(self._slots)

    def submit(self, markup: str) -> "Future[bytes]":
        """Send markup to the next slot and return a future for the image bytes."""
        with self._lock:
            if self._shut_down:
                raise RenderError("RenderDispatcher has been shut down")
            index = self._counter % self.pool_size
            if index == len(self._slots):
                self._slots.append(self._start_slot(index))
            slot = self._slots[index]
            self._counter += 1
        return slot.submit(markup)

    def shutdown(self, *, wait: bool = False, timeout: float | None = None) -> None:
        """Close every input stream.

        Outstanding futures are not awaited unless ``wait`` is set, in which
        case reader threads are joined and the processes reaped.
        """
        with self._lock:
            self._shut_down = True
            slots = list(self._slots)
        for slot in slots:
            slot.close()
        if wait:
            for slot in slots:
                slot.wait(timeout)

    def __enter__(self) -> "RenderDispatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def _start_slot(self, index: int) -> ProcessSlot:
        try:
            process = self._spawn(self.command)
        except FileNotFoundError as exc:
            raise RenderError(f"Unable to locate render executable '{self.command[0]}'.") from exc
        except OSError as exc:
            raise RenderError(f"Unable to start render process: {exc}") from exc
        logger.debug("Started render process %d (pid %s)", index, getattr(process, "pid", "?"))
        return ProcessSlot(index, process, self.delimiter)


__all__ = [
    "DEFAULT_DELIMITER",
    "ProcessSlot",
    "RenderDispatcher",
    "RenderError",
    "plantuml_command",
]
