from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Optional

from fastapi import APIRouter, FastAPI

if TYPE_CHECKING:
    from dashdeck.views.metadata import Facet


class Capability(Enum):
    ROUTES = auto()
    STATIC = auto()
    PAGE = auto()
    WIDGET = auto()


VIEW_CAPABILITIES = frozenset({Capability.PAGE, Capability.WIDGET})


@dataclass(frozen=True)
class ExtensionInfo:
    id: str
    name: str
    version: str
    description: str = ""


class Extension:
    def info(self) -> ExtensionInfo:
        raise NotImplementedError

    def requested_capabilities(self) -> set[Capability]:
        return set()

    def declared_metadata(self) -> dict[Facet, Any]:
        """Facet values this extension declares for its view descriptor.

        Facets left out fall back to their defaults.
        """
        return {}

    def setup(
        self,
        *,
        app: FastAPI,
        mount_path: str,
        grants: set[Capability],
        context: dict[str, Any] | None = None,
    ) -> Optional[APIRouter]:
        return None
