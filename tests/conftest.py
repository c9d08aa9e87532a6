from __future__ import annotations

import logging
import sys
import textwrap
from pathlib import Path
from typing import Iterator, List

import pytest

from tests._fixtures.model_builder import ModelBuilder
from umldoc.render.dispatcher import DEFAULT_DELIMITER

_FAKE_RENDERER = textwrap.dedent(
    '''
    """Speaks the PlantUML pipe protocol: echoes each diagram prefixed with its pid."""
    import os
    import sys

    delimiter = sys.argv[1].encode("utf-8")
    stdin = sys.stdin.buffer
    stdout = sys.stdout.buffer
    collected = []
    while True:
        raw = stdin.readline()
        if not raw:
            break
        line = raw.decode("utf-8").rstrip("\\n")
        if "CRASH" in line:
            sys.exit(3)
        collected.append(line)
        if line.strip() == "@enduml":
            body = "\\n".join(collected)
            collected = []
            stdout.write(f"{os.getpid()}:{body}".encode("utf-8") + delimiter + b"\\n")
            stdout.flush()
    '''
)


@pytest.fixture
def model_builder() -> ModelBuilder:
    """Provide an empty reflection model builder."""
    return ModelBuilder()


@pytest.fixture
def fake_renderer(tmp_path: Path) -> List[str]:
    """Command line of a stand-in render process speaking the pipe protocol."""
    script = tmp_path / "fake_renderer.py"
    script.write_text(_FAKE_RENDERER, encoding="utf-8")
    return [sys.executable, str(script), DEFAULT_DELIMITER]


@pytest.fixture(autouse=True)
def _reset_umldoc_logger() -> Iterator[None]:
    yield
    # configure_logging() detaches the package logger from the root logger.
    logger = logging.getLogger("umldoc")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
