#!/usr/bin/env python3
"""
Shared pytest fixtures for dashdeck tests.

Provides in-memory extensions with configurable capabilities and metadata,
and helpers that lay out extension directories on disk for the loader.
"""

import json
import os
import sys
import textwrap
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dashdeck.plugins.base import Capability, Extension, ExtensionInfo
from dashdeck.views.metadata import Facet

REPO_EXTENSIONS_DIR = Path(__file__).resolve().parent.parent / "extensions"


class FakeExtension(Extension):
    """Extension whose info, capabilities and metadata are given at construction."""

    def __init__(
        self,
        id: str = "fake",
        title: str = "Fake",
        capabilities: Iterable[Capability] = (Capability.PAGE,),
        metadata: Optional[Dict[Facet, Any]] = None,
    ):
        self._id = id
        self._title = title
        self._capabilities = set(capabilities)
        self._metadata = metadata or {}
        self.metadata_calls = 0

    def info(self) -> ExtensionInfo:
        return ExtensionInfo(id=self._id, name=self._title, version="0.1.0")

    def requested_capabilities(self) -> set:
        return set(self._capabilities)

    def declared_metadata(self) -> Dict[Facet, Any]:
        self.metadata_calls += 1
        return self._metadata


class HotspotsWidget(FakeExtension):
    """Named subclass so error messages carry a recognizable type name."""


@pytest.fixture
def make_extension():
    """Factory for in-memory extensions."""
    def _make(id="fake", title="Fake", capabilities=(Capability.PAGE,), metadata=None, cls=FakeExtension):
        return cls(id=id, title=title, capabilities=capabilities, metadata=metadata)
    return _make


@pytest.fixture
def make_widget(make_extension):
    def _make(id="widget", title="Widget", metadata=None, cls=FakeExtension):
        return make_extension(id=id, title=title, capabilities=(Capability.WIDGET,), metadata=metadata, cls=cls)
    return _make


EXTENSION_SOURCE = '''
from dashdeck.plugins.base import Capability, Extension, ExtensionInfo
from fastapi import APIRouter


class GeneratedExtension(Extension):
    def info(self):
        return ExtensionInfo(id={class_id!r}, name={title!r}, version="0.1.0")

    def requested_capabilities(self):
        return set([{capabilities}])

    def setup(self, *, app, mount_path, grants, context=None):
        router = APIRouter()

        @router.get("/ping")
        def ping():
            return {{"pong": {class_id!r}}}

        return router


def get_extension():
    return GeneratedExtension()
'''


@pytest.fixture
def write_extension(tmp_path):
    """Write an extension.json + extension.py pair under tmp_path/extensions/<dirname>."""
    base = tmp_path / "extensions"
    base.mkdir(exist_ok=True)

    def _write(
        ext_id: str,
        title: str = "Generated",
        capabilities: Iterable[str] = ("PAGE",),
        grants: Optional[Iterable[str]] = None,
        views: Optional[Dict[str, Any]] = None,
        class_id: Optional[str] = None,
        enabled: bool = True,
        manifest_overrides: Optional[Dict[str, Any]] = None,
    ) -> Path:
        d = base / ext_id.strip("/")
        d.mkdir()
        manifest: Dict[str, Any] = {
            "id": ext_id,
            "name": title,
            "version": "0.1.0",
            "module": "extension.py",
            "enabled": enabled,
        }
        if grants is not None:
            manifest["grants"] = list(grants)
        if views is not None:
            manifest["views"] = views
        manifest.update(manifest_overrides or {})
        (d / "extension.json").write_text(json.dumps(manifest))
        caps = ", ".join(f"Capability.{c}" for c in capabilities) or ""
        source = EXTENSION_SOURCE.format(
            class_id=class_id if class_id is not None else ext_id,
            title=title,
            capabilities=caps,
        )
        (d / "extension.py").write_text(textwrap.dedent(source))
        return d

    _write.base = base
    return _write
