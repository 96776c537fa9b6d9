"""The REST API service: configuration, lifecycle and the health endpoint."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

_SERVICE_VERSION = "0.1.0"


@dataclass
class RestConfig:
    address: str = "0.0.0.0"
    port: int = 8080


@dataclass(frozen=True)
class HealthResponse:
    status: str
    version: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def health_check() -> HealthResponse:
    """Report that the service is up, with its version."""
    return HealthResponse(status="ok", version=_SERVICE_VERSION)


@dataclass
class RestServer:
    """Holds the REST configuration, its routes and run state."""

    config: RestConfig = field(default_factory=RestConfig)
    running: bool = field(default=False, init=False)
    routes: Dict[str, Callable[[], Any]] = field(init=False)

    def __init__(self, config: Optional[RestConfig] = None) -> None:
        self.config = config if config is not None else RestConfig()
        self.running = False
        self.routes = {"/health": health_check}

    @property
    def address(self) -> str:
        return f"{self.config.address}:{self.config.port}"

    def start(self) -> None:
        logger.info("REST API server would start on %s", self.address)
        self.running = True

    def stop(self) -> None:
        self.running = False

    def handle(self, path: str) -> Dict[str, Any]:
        """Answer a GET for path; unknown paths raise KeyError."""
        try:
            endpoint = self.routes[path]
        except KeyError:
            raise KeyError(f"no route for {path}") from None
        return endpoint().to_dict()