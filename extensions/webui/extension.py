from __future__ import annotations

import html
from pathlib import Path
from typing import Any, Optional

from fastapi import APIRouter, FastAPI
from fastapi.responses import FileResponse, HTMLResponse

from dashdeck.plugins.base import Capability, Extension, ExtensionInfo
from dashdeck.views.metadata import Facet, NavigationSection


class WebUIExtension(Extension):
    def info(self) -> ExtensionInfo:
        return ExtensionInfo(
            id="webui",
            name="Console Home",
            version="0.1.0",
            description="Simple static home page served as an extension",
        )

    def requested_capabilities(self) -> set[Capability]:
        return {Capability.ROUTES, Capability.STATIC, Capability.PAGE}

    def declared_metadata(self) -> dict[Facet, Any]:
        return {
            Facet.NAVIGATION_SECTION: [NavigationSection.HOME],
            Facet.DESCRIPTION: "Landing page listing the installed views",
        }

    def setup(
        self,
        *,
        app: FastAPI,
        mount_path: str,
        grants: set[Capability],
        context: dict[str, Any] | None = None,
    ) -> Optional[APIRouter]:
        router = APIRouter()
        static_dir = Path(__file__).parent / "static"
        index = static_dir / "index.html"
        views = (context or {}).get("views")

        @router.get("/")
        def index_page():
            if index.exists():
                return FileResponse(index)
            items = "".join(
                f"<li>{html.escape(v.title)}</li>" for v in (views.all() if views is not None else [])
            )
            return HTMLResponse(f"<h1>dashdeck</h1><ul>{items}</ul>")

        return router


def get_extension() -> Extension:
    return WebUIExtension()
