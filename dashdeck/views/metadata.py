"""
Metadata facets declared by view extensions and the resolvers that look them up.

A facet is one independent category of declarative metadata (navigation
placement, required roles, resource scope, widget properties, ...). Resolvers
answer "what did this extension declare for this facet?" and return None when
nothing was declared.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple

from dashdeck.errors import ExtensionConfigError


class Facet(Enum):
    """Kinds of view metadata an extension may declare."""
    NAVIGATION_SECTION = "sections"
    USER_ROLE = "user_roles"
    RESOURCE_SCOPE = "resource_scopes"
    RESOURCE_QUALIFIER = "resource_qualifiers"
    RESOURCE_LANGUAGE = "resource_languages"
    DEFAULT_TAB = "default_tab"
    DESCRIPTION = "description"
    WIDGET_PROPERTIES = "widget_properties"
    WIDGET_CATEGORY = "widget_categories"
    WIDGET_LAYOUT = "widget_layout"
    WIDGET_SCOPE = "widget_scope"
    REQUIRED_MEASURES = "required_measures"


class NavigationSection:
    """Well-known navigation sections of the console."""
    HOME = "HOME"
    RESOURCE = "RESOURCE"
    RESOURCE_TAB = "RESOURCE_TAB"
    RESOURCE_CONFIGURATION = "RESOURCE_CONFIGURATION"
    CONFIGURATION = "CONFIGURATION"


class WidgetLayoutType(str, Enum):
    """How the dashboard frames a widget."""
    DEFAULT = "DEFAULT"
    NONE = "NONE"


class WidgetPropertyType(str, Enum):
    """Value types a widget property can hold."""
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    FLOAT = "FLOAT"
    STRING = "STRING"
    TEXT = "TEXT"
    METRIC = "METRIC"
    FILTER = "FILTER"
    SINGLE_SELECT_LIST = "SINGLE_SELECT_LIST"


@dataclass(frozen=True)
class WidgetProperty:
    """A named, typed configuration slot exposed by a widget."""
    key: str
    type: WidgetPropertyType = WidgetPropertyType.STRING
    default_value: Optional[str] = ""
    optional: bool = True
    description: str = ""
    options: Tuple[str, ...] = ()

    @property
    def is_required(self) -> bool:
        return not self.optional and not self.default_value


@dataclass(frozen=True)
class DefaultTab:
    """Marks a page as a default resource tab.

    With no metrics the page is the default tab for every metric; otherwise
    it is the default only for the listed metrics.
    """
    metrics: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RequiredMeasures:
    """Measures that must be available for a view to apply."""
    all_of: Tuple[str, ...] = ()
    any_of: Tuple[str, ...] = ()


class MetadataResolver(Protocol):
    """Looks up the value an extension declares for a facet, or None if absent."""

    def resolve(self, extension: Any, facet: Facet) -> Any:
        ...


class DeclaredMetadataResolver:
    """Reads facets from the extension's own ``declared_metadata()`` mapping."""

    def resolve(self, extension: Any, facet: Facet) -> Any:
        declared = getattr(extension, "declared_metadata", None)
        if declared is None:
            return None
        return (declared() or {}).get(facet)


class ChainedMetadataResolver:
    """Asks each resolver in turn; the first non-None answer wins."""

    def __init__(self, *resolvers: MetadataResolver) -> None:
        self._resolvers = resolvers

    def resolve(self, extension: Any, facet: Facet) -> Any:
        for resolver in self._resolvers:
            value = resolver.resolve(extension, facet)
            if value is not None:
                return value
        return None


def _strings(raw: Iterable[Any]) -> Tuple[str, ...]:
    return tuple(str(v) for v in raw)


def widget_property_from_dict(raw: Mapping[str, Any]) -> WidgetProperty:
    """Build a WidgetProperty from its manifest form."""
    try:
        prop_type = WidgetPropertyType(str(raw.get("type", "STRING")).upper())
    except ValueError as e:
        raise ExtensionConfigError(
            f"Unknown widget property type {raw.get('type')!r} for property {raw.get('key')!r}"
        ) from e
    default_value = raw.get("default_value", "")
    return WidgetProperty(
        key=str(raw["key"]),
        type=prop_type,
        default_value=None if default_value is None else str(default_value),
        optional=bool(raw.get("optional", True)),
        description=str(raw.get("description", "")),
        options=_strings(raw.get("options", ())),
    )


class ManifestMetadataResolver:
    """Resolves facets from the ``views`` block of an extension manifest.

    The block uses the facet values as keys, e.g.::

        {"sections": ["RESOURCE_TAB"],
         "default_tab": {"metrics": ["coverage"]},
         "widget_properties": [{"key": "max", "type": "INTEGER", "default_value": "5"}],
         "required_measures": {"all_of": ["ncloc"], "any_of": []}}
    """

    def __init__(self, views: Optional[Mapping[str, Any]] = None) -> None:
        self._facets: Dict[Facet, Any] = {}
        for facet in Facet:
            if views and facet.value in views:
                self._facets[facet] = self._convert(facet, views[facet.value])

    def resolve(self, extension: Any, facet: Facet) -> Any:
        return self._facets.get(facet)

    @staticmethod
    def _convert(facet: Facet, raw: Any) -> Any:
        if facet is Facet.DESCRIPTION:
            return str(raw)
        if facet is Facet.DEFAULT_TAB:
            return DefaultTab(metrics=_strings((raw or {}).get("metrics", ())))
        if facet is Facet.WIDGET_PROPERTIES:
            return tuple(widget_property_from_dict(p) for p in raw)
        if facet is Facet.WIDGET_LAYOUT:
            try:
                return WidgetLayoutType(str(raw).upper())
            except ValueError as e:
                raise ExtensionConfigError(f"Unknown widget layout {raw!r}") from e
        if facet is Facet.REQUIRED_MEASURES:
            return RequiredMeasures(
                all_of=_strings(raw.get("all_of", ())),
                any_of=_strings(raw.get("any_of", ())),
            )
        return _strings(raw)
