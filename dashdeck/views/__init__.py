"""View descriptors: normalized metadata for pages and widgets contributed by extensions.

Extensions declare facets (navigation sections, resource scopes, widget
properties, required measures, ...). The registry snapshots them into
read-only descriptors that the console queries when selecting what to render.
"""

from .descriptor import ViewDescriptor
from .metadata import (
    ChainedMetadataResolver,
    DeclaredMetadataResolver,
    DefaultTab,
    Facet,
    ManifestMetadataResolver,
    MetadataResolver,
    NavigationSection,
    RequiredMeasures,
    WidgetLayoutType,
    WidgetProperty,
    WidgetPropertyType,
)
from .registry import ResourceContext, ViewRegistry, applies_to

__all__ = [
    "ViewDescriptor",
    "ViewRegistry",
    "ResourceContext",
    "applies_to",
    "Facet",
    "MetadataResolver",
    "DeclaredMetadataResolver",
    "ManifestMetadataResolver",
    "ChainedMetadataResolver",
    "NavigationSection",
    "DefaultTab",
    "RequiredMeasures",
    "WidgetLayoutType",
    "WidgetProperty",
    "WidgetPropertyType",
]
