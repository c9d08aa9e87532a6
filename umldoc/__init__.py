"""UML class hierarchy diagrams for API documentation."""

from .config import ConfigError, UmlDocConfig, load_config
from .orchestrator import DiagramOutcome, Orchestrator, RunReport

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DiagramOutcome",
    "Orchestrator",
    "RunReport",
    "UmlDocConfig",
    "__version__",
    "load_config",
]
