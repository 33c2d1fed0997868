from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request

from dashdeck import __version__
from dashdeck.config import ConsoleConfig, setup_logging
from dashdeck.observability.logging import track_http_requests
from dashdeck.plugins.loader import ExtensionLoader
from dashdeck.views.registry import ResourceContext, ViewRegistry

from .schemas import ExtensionStatus, ViewDetail, ViewSummary


def _measures(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    return [m.strip() for m in raw.split(",") if m.strip()]


def _resource(scope: Optional[str], qualifier: Optional[str], language: Optional[str]) -> Optional[ResourceContext]:
    if scope is None and qualifier is None and language is None:
        return None
    return ResourceContext(scope=scope, qualifier=qualifier, language=language)


def _registry(request: Request) -> ViewRegistry:
    return request.app.state.registry


def create_app(config: ConsoleConfig | None = None) -> FastAPI:
    config = config or ConsoleConfig.from_environment()
    setup_logging(config)

    app = FastAPI(title="dashdeck", version=__version__)
    track_http_requests(app, mount_root=config.mount_root)

    registry = ViewRegistry()
    loader = ExtensionLoader(app, registry, config)
    loader.load_all()
    if config.freeze_registry:
        registry.freeze()
    app.state.registry = registry
    app.state.loader = loader

    @app.get("/health")
    def health(request: Request):
        return {"status": "ok", "views": len(_registry(request))}

    @app.get("/extensions", response_model=List[ExtensionStatus])
    def extensions():
        return [
            ExtensionStatus(
                id=pid,
                root=str(spec.root),
                module=spec.module,
                enabled=spec.enabled,
                source=spec.source,
                grants=sorted(c.name for c in (spec.grants or set())),
                status=loader.status.get(pid, {}),
            )
            for pid, spec in loader.specs.items()
        ]

    @app.get("/views", response_model=List[ViewSummary])
    def list_pages(
        request: Request,
        section: Optional[str] = None,
        scope: Optional[str] = None,
        qualifier: Optional[str] = None,
        language: Optional[str] = None,
        measures: Optional[str] = Query(None, description="Comma-separated available measures"),
    ):
        pages = _registry(request).pages(
            section=section,
            resource=_resource(scope, qualifier, language),
            available_measures=_measures(measures),
        )
        return [ViewSummary.from_descriptor(p) for p in pages]

    @app.get("/widgets", response_model=List[ViewSummary])
    def list_widgets(
        request: Request,
        scope: Optional[str] = None,
        qualifier: Optional[str] = None,
        language: Optional[str] = None,
        measures: Optional[str] = Query(None, description="Comma-separated available measures"),
        global_only: Optional[bool] = None,
    ):
        widgets = _registry(request).widgets(
            resource=_resource(scope, qualifier, language),
            available_measures=_measures(measures),
            global_only=global_only,
        )
        return [ViewSummary.from_descriptor(w) for w in widgets]

    @app.get("/default-tab", response_model=ViewDetail)
    def default_tab(
        request: Request,
        scope: Optional[str] = None,
        qualifier: Optional[str] = None,
        language: Optional[str] = None,
        metric: Optional[str] = None,
    ):
        tab = _registry(request).default_tab(resource=_resource(scope, qualifier, language), metric=metric)
        if tab is None:
            raise HTTPException(status_code=404, detail="no default tab")
        return ViewDetail.from_descriptor(tab)

    @app.get("/views/{view_id:path}", response_model=ViewDetail)
    def get_view(request: Request, view_id: str):
        view = _registry(request).find(view_id)
        if view is None:
            raise HTTPException(status_code=404, detail=f"view {view_id} not found")
        return ViewDetail.from_descriptor(view)

    return app
