"""Pipeline orchestration: model in, class diagrams and a manifest out."""

from __future__ import annotations

import json
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import OutputConfig, UmlDocConfig, load_config
from .hierarchy import HierarchyResolver
from .logging import get_logger
from .models import Node, Project
from .plantuml.encoder import MarkupEncoder
from .plantuml.generator import DiagramCodeGenerator, markup_text
from .plantuml.options import DiagramType
from .reflection import load_project
from .render.dispatcher import RenderDispatcher, RenderError
from .render.images import (
    ImageLocation,
    ImageWriter,
    create_embedded_image_url,
    create_server_url,
)
from .stores import CodeGenCache

MANIFEST_FILENAME = "diagrams.json"

DispatcherFactory = Callable[[UmlDocConfig], RenderDispatcher]


@dataclass
class DiagramOutcome:
    """What happened to the diagram of one class or interface."""

    node_id: int
    name: str
    url: Optional[str] = None
    path: Optional[str] = None
    source_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.url is not None


@dataclass
class RunReport:
    """Summary of one generation pass."""

    output_dir: Path
    location: ImageLocation
    diagrams: List[DiagramOutcome] = field(default_factory=list)
    skipped: int = 0
    manifest_path: Optional[Path] = None
    cache_hits: int = 0
    cache_misses: int = 0

    @property
    def rendered(self) -> int:
        return sum(1 for outcome in self.diagrams if outcome.ok)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.diagrams if outcome.error is not None)


def _default_dispatcher(config: UmlDocConfig) -> RenderDispatcher:
    render = config.render
    return RenderDispatcher(
        render.pool_size,
        config.output.format,
        command=render.command or None,
        jar_path=render.plantuml_jar,
    )


class Orchestrator:
    """Coordinates loading, generation and rendering of class diagrams."""

    def __init__(
        self,
        dispatcher_factory: DispatcherFactory | None = None,
        encoder: MarkupEncoder | None = None,
    ) -> None:
        self.dispatcher_factory = dispatcher_factory or _default_dispatcher
        self.encoder = encoder or MarkupEncoder()
        self.logger = get_logger("orchestrator")

    def run(
        self,
        model_path: str | Path,
        output_dir: str | Path,
        *,
        config: UmlDocConfig | None = None,
    ) -> RunReport:
        """Generate diagrams for every class and interface of a model."""
        model_file = Path(model_path).expanduser().resolve()
        target = Path(output_dir).expanduser().resolve()
        config = config or load_config(model_file.parent)
        project = load_project(model_file)
        self.logger.info("Loaded %d reflections from %s", len(project.nodes), model_file)

        report = RunReport(output_dir=target, location=config.output.location)
        if config.diagram.type is DiagramType.NONE:
            self.logger.info("Diagram type is 'none'; nothing to generate")
            return report

        cache = CodeGenCache()
        generator = self._generator(config, cache)
        jobs = self._generate_all(project, generator, report)

        if config.output.location is ImageLocation.REMOTE:
            self._link_remote(jobs, config, report)
        else:
            self._render_local(jobs, config, target, report)

        report.cache_hits = cache.hits
        report.cache_misses = cache.misses
        report.manifest_path = self._write_manifest(target, report)
        self.logger.info(
            "Generated %d diagram(s), %d failed, %d type(s) without hierarchy",
            report.rendered,
            report.failed,
            report.skipped,
        )
        return report

    def markup_for(self, project: Project, name: str, config: UmlDocConfig | None = None) -> str:
        """Complete markup for one type, or an empty string if it has no relations."""
        node = project.find(name)
        options = config.diagram if config else None
        generator = DiagramCodeGenerator.caching(options, CodeGenCache())
        return markup_text(generator.generate_for(node))

    def url_for(self, project: Project, name: str, config: UmlDocConfig | None = None) -> Optional[str]:
        """Server URL rendering one type's diagram, or ``None`` if there is nothing to draw."""
        markup = self.markup_for(project, name, config)
        if not markup:
            return None
        output = config.output if config else OutputConfig()
        return create_server_url(self.encoder.encode(markup), output.format, output.remote_base_url)

    def _generator(self, config: UmlDocConfig, cache: CodeGenCache) -> DiagramCodeGenerator:
        return DiagramCodeGenerator.caching(config.diagram, cache, HierarchyResolver())

    def _generate_all(
        self, project: Project, generator: DiagramCodeGenerator, report: RunReport
    ) -> List[Tuple[Node, str]]:
        jobs: List[Tuple[Node, str]] = []
        for node in project.class_like():
            lines = generator.generate_for(node)
            if not lines:
                report.skipped += 1
                continue
            jobs.append((node, markup_text(lines)))
        self.logger.debug("Prepared %d diagram(s)", len(jobs))
        return jobs

    def _link_remote(
        self, jobs: List[Tuple[Node, str]], config: UmlDocConfig, report: RunReport
    ) -> None:
        output = config.output
        for node, markup in jobs:
            token = self.encoder.encode(markup)
            url = create_server_url(token, output.format, output.remote_base_url)
            report.diagrams.append(DiagramOutcome(node_id=node.id, name=node.name, url=url))

    def _render_local(
        self,
        jobs: List[Tuple[Node, str]],
        config: UmlDocConfig,
        target: Path,
        report: RunReport,
    ) -> None:
        if not jobs:
            return
        output = config.output
        writer = ImageWriter(target)
        dispatcher = self.dispatcher_factory(config)
        try:
            # Every diagram is queued before the first result is awaited.
            submitted: List[Tuple[Node, str, Optional[Future[bytes]], Optional[str]]] = []
            for node, markup in jobs:
                try:
                    submitted.append((node, markup, dispatcher.submit(markup), None))
                except RenderError as exc:
                    submitted.append((node, markup, None, str(exc)))

            for node, markup, future, error in submitted:
                outcome = DiagramOutcome(node_id=node.id, name=node.name, error=error)
                report.diagrams.append(outcome)
                if future is None:
                    self.logger.warning("Could not submit diagram for %s: %s", node.name, error)
                    continue
                try:
                    image = future.result(timeout=config.render.timeout)
                except FutureTimeoutError:
                    outcome.error = f"Timed out after {config.render.timeout:g}s"
                    self.logger.warning("Rendering %s timed out", node.name)
                    continue
                except RenderError as exc:
                    outcome.error = str(exc)
                    self.logger.warning("Rendering %s failed: %s", node.name, exc)
                    continue

                if output.location is ImageLocation.EMBED:
                    outcome.url = create_embedded_image_url(image, output.format)
                    continue
                path = writer.write(image, output.format)
                outcome.path = str(path)
                outcome.url = path.name
                if output.create_plantuml_files:
                    outcome.source_path = str(writer.write_source(path, markup))
        finally:
            dispatcher.shutdown()

    def _write_manifest(self, target: Path, report: RunReport) -> Path:
        target.mkdir(parents=True, exist_ok=True)
        payload: Dict[str, Any] = {
            "location": report.location.value,
            "diagrams": [asdict(outcome) for outcome in report.diagrams],
        }
        path = target / MANIFEST_FILENAME
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        return path


__all__ = ["DiagramOutcome", "MANIFEST_FILENAME", "Orchestrator", "RunReport"]
