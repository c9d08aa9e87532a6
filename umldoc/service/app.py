"""FastAPI application entrypoint for umldoc service mode."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import UmlDocConfig
from ..plantuml.encoder import MarkupEncoder
from ..plantuml.generator import DiagramCodeGenerator, markup_text
from ..reflection import ModelError, parse_project
from ..render.images import ImageFormat, create_server_url
from ..stores import CodeGenCache


class DiagramRequest(BaseModel):
    model: Dict[str, Any]
    name: str
    format: Optional[ImageFormat] = None


class DiagramResponse(BaseModel):
    name: str
    lines: List[str]
    markup: str
    url: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _default_config() -> UmlDocConfig:
    return UmlDocConfig(root=Path.cwd())


def create_app(
    config_factory: Callable[[], UmlDocConfig] = _default_config,
) -> FastAPI:
    """Create the FastAPI application exposing diagram generation."""

    app = FastAPI(title="UmlDoc Service", version="0.1.0")
    encoder = MarkupEncoder()

    async def get_config() -> UmlDocConfig:
        return config_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/diagram", response_model=DiagramResponse)
    async def diagram(
        payload: DiagramRequest,
        config: UmlDocConfig = Depends(get_config),
    ) -> DiagramResponse:
        if payload.format is not None:
            config = replace(config, output=replace(config.output, format=payload.format))

        def _generate() -> DiagramResponse:
            project = parse_project(payload.model)
            node = project.find(payload.name)
            generator = DiagramCodeGenerator.caching(config.diagram, CodeGenCache())
            lines = generator.generate_for(node)
            markup = markup_text(lines)
            url = None
            if markup:
                output = config.output
                url = create_server_url(encoder.encode(markup), output.format, output.remote_base_url)
            return DiagramResponse(name=node.name, lines=lines, markup=markup, url=url)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _generate)

    @app.exception_handler(LookupError)
    async def lookup_error_handler(_: Any, exc: LookupError) -> JSONResponse:
        detail = exc.args[0] if exc.args else str(exc)
        return JSONResponse(status_code=404, content={"detail": detail})

    @app.exception_handler(ModelError)
    async def model_error_handler(_: Any, exc: ModelError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["DiagramRequest", "DiagramResponse", "create_app", "run_service"]
