"""Tests for RenderDispatcher and its process slots."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

import pytest

from umldoc.render import DEFAULT_DELIMITER, RenderDispatcher, RenderError, plantuml_command

TIMEOUT = 20


def _markup(label: str) -> str:
    return f"@startuml\nclass {label} {{\n}}\n@enduml"


def _pid_and_body(image: bytes) -> tuple[str, str]:
    pid, _, body = image.decode("utf-8").partition(":")
    return pid, body


def test_single_process_answers_in_submission_order(fake_renderer: List[str]) -> None:
    with RenderDispatcher(1, command=fake_renderer) as dispatcher:
        futures = [dispatcher.submit(_markup(f"Node{index}")) for index in range(5)]
        results = [_pid_and_body(future.result(timeout=TIMEOUT)) for future in futures]

    assert [body for _, body in results] == [_markup(f"Node{index}") for index in range(5)]
    assert len({pid for pid, _ in results}) == 1
    assert dispatcher.slot_count == 1


def test_submissions_rotate_over_the_pool(fake_renderer: List[str]) -> None:
    dispatcher = RenderDispatcher(3, command=fake_renderer)
    try:
        futures = [dispatcher.submit(_markup(f"Node{index}")) for index in range(7)]
        pids = [_pid_and_body(future.result(timeout=TIMEOUT))[0] for future in futures]
    finally:
        dispatcher.shutdown(wait=True, timeout=TIMEOUT)

    assert dispatcher.slot_count == 3
    assert len(set(pids[:3])) == 3
    assert pids[3:6] == pids[:3]
    assert pids[6] == pids[0]
    assert str(os.getpid()) not in pids


def test_processes_start_lazily(fake_renderer: List[str]) -> None:
    dispatcher = RenderDispatcher(4, command=fake_renderer)
    try:
        assert dispatcher.slot_count == 0
        first = dispatcher.submit(_markup("A"))
        second = dispatcher.submit(_markup("B"))
        assert dispatcher.slot_count == 2
        assert first.result(timeout=TIMEOUT) != second.result(timeout=TIMEOUT)
    finally:
        dispatcher.shutdown(wait=True, timeout=TIMEOUT)


@pytest.mark.parametrize("pool_size", [0, -2, True, 1.5])
def test_invalid_pool_sizes_are_rejected(pool_size: object) -> None:
    with pytest.raises(ValueError):
        RenderDispatcher(pool_size)  # type: ignore[arg-type]


def test_crash_fails_pending_work_and_later_submissions(fake_renderer: List[str]) -> None:
    dispatcher = RenderDispatcher(1, command=fake_renderer)
    try:
        crashed = dispatcher.submit(_markup("CRASH"))
        with pytest.raises(RenderError):
            crashed.result(timeout=TIMEOUT)

        after = dispatcher.submit(_markup("Later"))
        with pytest.raises(RenderError):
            after.result(timeout=TIMEOUT)
        assert not dispatcher.slots[0].alive
    finally:
        dispatcher.shutdown(wait=True, timeout=TIMEOUT)


def test_crash_in_one_slot_leaves_the_others_working(fake_renderer: List[str]) -> None:
    dispatcher = RenderDispatcher(2, command=fake_renderer)
    try:
        crashed = dispatcher.submit(_markup("CRASH"))
        healthy = dispatcher.submit(_markup("Fine"))

        with pytest.raises(RenderError):
            crashed.result(timeout=TIMEOUT)
        assert _pid_and_body(healthy.result(timeout=TIMEOUT))[1] == _markup("Fine")
    finally:
        dispatcher.shutdown(wait=True, timeout=TIMEOUT)


def test_missing_executable_raises_render_error(tmp_path: Path) -> None:
    dispatcher = RenderDispatcher(1, command=[str(tmp_path / "no-such-renderer")])

    with pytest.raises(RenderError, match="Unable to locate render executable"):
        dispatcher.submit(_markup("A"))


def test_submit_after_shutdown_is_rejected(fake_renderer: List[str]) -> None:
    dispatcher = RenderDispatcher(1, command=fake_renderer)
    dispatcher.shutdown()

    with pytest.raises(RenderError, match="shut down"):
        dispatcher.submit(_markup("A"))


def test_shutdown_lets_queued_work_finish(fake_renderer: List[str]) -> None:
    dispatcher = RenderDispatcher(1, command=fake_renderer)
    futures = [dispatcher.submit(_markup(f"N{index}")) for index in range(3)]

    dispatcher.shutdown(wait=True, timeout=TIMEOUT)

    assert all(future.done() for future in futures)
    assert [_pid_and_body(f.result())[1] for f in futures] == [_markup(f"N{i}") for i in range(3)]
    assert dispatcher.slots[0].pending_count == 0


def test_plantuml_command_uses_pipe_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLANTUML_JAR", "/opt/plantuml/plantuml.jar")

    command = plantuml_command("png")

    assert command[:4] == ["java", "-Djava.awt.headless=true", "-jar", "/opt/plantuml/plantuml.jar"]
    assert "-pipe" in command
    assert "-tpng" in command
    assert command[-2:] == ["-pipedelimitor", DEFAULT_DELIMITER]
    assert plantuml_command(jar_path="custom.jar")[3] == "custom.jar"


def test_default_command_follows_image_format() -> None:
    dispatcher = RenderDispatcher(2, "png", jar_path="plantuml.jar")

    assert "-tpng" in dispatcher.command
    assert dispatcher.slot_count == 0
