from __future__ import annotations

import importlib.util
import json
import sys
import time
from dataclasses import dataclass, field
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException
from jsonschema import ValidationError, validate

from dashdeck.config import ConsoleConfig
from dashdeck.errors import ExtensionConfigError
from dashdeck.observability.logging import loader_logger
from dashdeck.views.metadata import (
    ChainedMetadataResolver,
    DeclaredMetadataResolver,
    ManifestMetadataResolver,
)
from dashdeck.views.registry import ViewRegistry

from .base import VIEW_CAPABILITIES, Capability, Extension, ExtensionInfo
from .schema import MANIFEST_SCHEMA


@dataclass
class ExtensionSpec:
    id: str
    root: Path
    module: str
    enabled: bool = True
    grants: set[Capability] | None = None
    views: dict[str, Any] = field(default_factory=dict)
    source: str = "directory"


def _parse_grants(raw: list[str], manifest_path: Path) -> set[Capability]:
    try:
        return {Capability[g] for g in raw}
    except KeyError as e:
        raise ExtensionConfigError(f"Unknown capability {e.args[0]!r} in {manifest_path}") from e


def _spec_from_manifest(root: Path) -> ExtensionSpec | None:
    manifest = root / "extension.json"
    module = root / "extension.py"
    if not (manifest.exists() and module.exists()):
        return None
    try:
        with manifest.open(encoding="utf-8") as f:
            m = json.load(f)
    except (OSError, ValueError) as e:
        raise ExtensionConfigError(f"Unreadable manifest {manifest}: {e}") from e
    try:
        validate(instance=m, schema=MANIFEST_SCHEMA)
    except ValidationError as e:
        raise ExtensionConfigError(f"Invalid manifest {manifest}: {e.message}") from e
    return ExtensionSpec(
        id=m["id"],
        root=root,
        module=str(module),
        enabled=bool(m.get("enabled", True)),
        grants=_parse_grants(m.get("grants", []), manifest),
        views=m.get("views", {}),
    )


class ExtensionLoader:
    """Discovers extensions, mounts their routes and registers their views."""

    def __init__(self, app: FastAPI, registry: ViewRegistry, config: ConsoleConfig | None = None) -> None:
        self.app = app
        self.registry = registry
        self.config = config or ConsoleConfig()
        self.mount_root = self.config.mount_root.rstrip("/")
        self.loaded: dict[str, Extension] = {}
        self.specs: dict[str, ExtensionSpec] = {}
        self.status: dict[str, dict[str, Any]] = {}
        self.routes: dict[str, list[Any]] = {}

    def discover(self) -> list[ExtensionSpec]:
        specs: list[ExtensionSpec] = []
        for base in map(Path, self.config.extension_dirs):
            if base.is_dir():
                for d in sorted(p for p in base.iterdir() if p.is_dir()):
                    self._discover_dir(d, specs)
        for p in self.config.extension_paths:
            path = Path(p).expanduser()
            if path.is_dir():
                self._discover_dir(path, specs)
            elif path.is_file():
                specs.append(ExtensionSpec(
                    id=path.stem, root=path.parent, module=str(path), grants=set(), source="file"
                ))
        for ep in importlib_metadata.entry_points(group=self.config.entry_point_group):
            specs.append(ExtensionSpec(
                id=ep.name.replace(" ", "_"),
                root=Path("<entrypoint>"),
                module=str(ep.value),
                grants=set(),
                source="entry_point",
            ))
        return specs

    def _discover_dir(self, root: Path, specs: list[ExtensionSpec]) -> None:
        try:
            spec = _spec_from_manifest(root)
        except ExtensionConfigError as ex:
            loader_logger.extension_failed(root.name, ex)
            self.status[root.name] = {"state": "error", "error": str(ex)}
            return
        if spec:
            specs.append(spec)

    def _import_from_path(self, module_path: str, name: str):
        spec = importlib.util.spec_from_file_location(name, module_path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot import extension module: {module_path}")
        mod = importlib.util.module_from_spec(spec)
        sys.modules[spec.name] = mod
        spec.loader.exec_module(mod)
        return mod

    def _instantiate(self, spec: ExtensionSpec) -> Extension:
        if Path(spec.module).is_file():
            mod = self._import_from_path(spec.module, f"dashdeck_ext_{spec.id.strip('/')}")
            if not hasattr(mod, "get_extension"):
                raise ExtensionConfigError(f"Extension module {spec.module} missing get_extension()")
            return mod.get_extension()
        # Import string: 'package.module:get_extension' or 'package.module.factory'
        mod_name, _, attr = spec.module.partition(":")
        if not attr:
            mod_name, _, attr = spec.module.rpartition(".")
        if not mod_name:
            raise ExtensionConfigError(f"Invalid extension import string: {spec.module}")
        mod = importlib.import_module(mod_name)
        return getattr(mod, attr)()

    def load_all(self) -> list[ExtensionInfo]:
        infos: list[ExtensionInfo] = []
        for spec in self.discover():
            if not spec.enabled:
                continue
            self.specs[spec.id] = spec
            self.status[spec.id] = {"state": "discovered"}
        for pid in list(self.specs):
            info = self.load(pid)
            if info:
                infos.append(info)
        return infos

    def load(self, plugin_id: str) -> ExtensionInfo | None:
        """Load one discovered extension; failures are recorded in ``status``."""
        if plugin_id in self.loaded:
            return self.loaded[plugin_id].info()
        spec = self.specs.get(plugin_id)
        if not spec or not spec.enabled:
            return None
        started = time.time()
        registered = False
        try:
            ext = self._instantiate(spec)
            info = ext.info()
            if info.id != spec.id:
                raise ExtensionConfigError(f"Extension id mismatch: manifest '{spec.id}' vs class '{info.id}'")
            requested = ext.requested_capabilities()
            granted = spec.grants or set()
            grants = requested.intersection(granted) if granted else set(requested)

            if requested & VIEW_CAPABILITIES:
                resolver = ChainedMetadataResolver(
                    DeclaredMetadataResolver(),
                    ManifestMetadataResolver(spec.views),
                )
                self.registry.register(ext, resolver)
                registered = True

            router: APIRouter | None = ext.setup(
                app=self.app,
                mount_path=f"{self.mount_root}/{info.id.lstrip('/')}",
                grants=grants,
                context={"views": self.registry},
            )
            if router and Capability.ROUTES in grants:
                before = len(self.app.router.routes)
                self.app.include_router(
                    router,
                    prefix=f"{self.mount_root}/{info.id.lstrip('/')}",
                    dependencies=[Depends(self._scope_dependency(info.id))],
                )
                self.routes[info.id] = self.app.router.routes[before:]
                self.app.openapi_schema = None

            self.loaded[info.id] = ext
            duration_ms = (time.time() - started) * 1000
            self.status[info.id] = {"state": "loaded", "loaded_ms": int(duration_ms)}
            loader_logger.extension_loaded(info.id, sorted(c.name for c in grants), duration_ms)
            return info
        except Exception as ex:  # noqa: BLE001
            loader_logger.extension_failed(plugin_id, ex)
            if registered:
                self.registry.unregister(plugin_id)
            self.status[plugin_id] = {"state": "error", "error": str(ex)}
            return None

    def unload(self, plugin_id: str) -> None:
        """Drop the extension's routes and view; ``load`` can bring it back."""
        self.loaded.pop(plugin_id, None)
        mounted = self.routes.pop(plugin_id, [])
        if mounted:
            dropped = {id(r) for r in mounted}
            self.app.router.routes[:] = [r for r in self.app.router.routes if id(r) not in dropped]
            self.app.openapi_schema = None
        self.registry.unregister(plugin_id)
        if plugin_id in self.status:
            self.status[plugin_id] = {"state": "unloaded"}

    def _scope_dependency(self, pid: str):
        require = self.config.require_scopes

        async def dep(x_scopes: str | None = Header(default=None, alias="X-Scopes")):
            if not require:
                return
            scopes = {s.strip() for s in (x_scopes or "").split(",") if s.strip()}
            needed = f"ext:{pid.lstrip('/')}:routes"
            if needed not in scopes:
                raise HTTPException(status_code=403, detail=f"missing scope {needed}")
        return dep
