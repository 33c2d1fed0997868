from __future__ import annotations

from dashdeck.plugins.base import Capability, Extension, ExtensionInfo


class HotspotsWidget(Extension):
    """Dashboard widget listing the files with the most issues.

    Its view metadata lives in the ``views`` block of extension.json.
    """

    def info(self) -> ExtensionInfo:
        return ExtensionInfo(id="hotspots", name="Hotspots", version="0.1.0")

    def requested_capabilities(self) -> set[Capability]:
        return {Capability.WIDGET}


def get_extension() -> Extension:
    return HotspotsWidget()
