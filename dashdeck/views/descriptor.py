"""
Normalized, read-only descriptors for view extensions.

A ViewDescriptor wraps one extension (page or widget) and snapshots every
facet of its metadata at registration time, applying defaults where a facet
is absent. The descriptor then answers the questions the console asks when
selecting views: does this tab support a metric, are the required measures
available, does the widget need configuration before it can render.

Descriptors compare equal by extension id and order by (title, id).
"""

from __future__ import annotations

import functools
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from dashdeck.errors import ExtensionConfigError, InvalidWidgetScopeError
from dashdeck.plugins.base import Capability, Extension
from dashdeck.views.metadata import (
    DeclaredMetadataResolver,
    Facet,
    MetadataResolver,
    NavigationSection,
    WidgetLayoutType,
    WidgetProperty,
)

PROJECT_SCOPE = "PROJECT"
GLOBAL_SCOPE = "GLOBAL"


@functools.total_ordering
class ViewDescriptor:
    """Immutable snapshot of a view extension's metadata."""

    def __init__(self, extension: Extension, resolver: Optional[MetadataResolver] = None) -> None:
        resolver = resolver or DeclaredMetadataResolver()
        info = extension.info()
        if not info.id:
            raise ExtensionConfigError(
                f"Extension {type(extension).__name__} declares an empty id"
            )

        self._extension = extension
        self._id = info.id
        self._title = info.name

        def lookup(facet: Facet) -> Any:
            return resolver.resolve(extension, facet)

        sections = lookup(Facet.NAVIGATION_SECTION)
        self._sections: FrozenSet[str] = (
            frozenset(_copy(sections)) if sections is not None else frozenset({NavigationSection.HOME})
        )
        self._user_roles = _copy(lookup(Facet.USER_ROLE))
        self._resource_scopes = _copy(lookup(Facet.RESOURCE_SCOPE))
        self._resource_qualifiers = _copy(lookup(Facet.RESOURCE_QUALIFIER))
        self._resource_languages = _copy(lookup(Facet.RESOURCE_LANGUAGE))

        self._is_default_tab = False
        self._default_tab_metrics: Tuple[str, ...] = ()
        default_tab = lookup(Facet.DEFAULT_TAB)
        if default_tab is not None:
            metrics = _copy(default_tab.metrics)
            if not metrics:
                self._is_default_tab = True
            else:
                self._default_tab_metrics = metrics

        description = lookup(Facet.DESCRIPTION)
        self._description = description if description is not None else ""

        properties: Dict[str, WidgetProperty] = {}
        for prop in lookup(Facet.WIDGET_PROPERTIES) or ():
            properties[prop.key] = prop
        self._widget_properties: Mapping[str, WidgetProperty] = MappingProxyType(properties)

        self._widget_categories = _copy(lookup(Facet.WIDGET_CATEGORY))

        layout = lookup(Facet.WIDGET_LAYOUT)
        self._widget_layout = WidgetLayoutType(layout) if layout is not None else WidgetLayoutType.DEFAULT

        self._is_global = False
        scopes = lookup(Facet.WIDGET_SCOPE)
        if scopes is not None:
            declared = _copy(scopes)
            for scope in declared:
                if scope != PROJECT_SCOPE and scope.upper() != GLOBAL_SCOPE:
                    raise InvalidWidgetScopeError(scope, type(extension).__name__)
            self._is_global = any(scope.upper() == GLOBAL_SCOPE for scope in declared)

        self._mandatory_measures: Tuple[str, ...] = ()
        self._any_of_measures: Tuple[str, ...] = ()
        required = lookup(Facet.REQUIRED_MEASURES)
        if required is not None:
            self._mandatory_measures = _copy(required.all_of)
            self._any_of_measures = _copy(required.any_of)

        capabilities = frozenset(extension.requested_capabilities())
        self._is_widget = Capability.WIDGET in capabilities
        self._is_page = Capability.PAGE in capabilities and not self._is_widget

        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(f"{type(self).__name__} is read-only")
        object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(f"{type(self).__name__} is read-only")
        object.__delattr__(self, name)

    # Identity

    @property
    def extension(self) -> Extension:
        return self._extension

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @property
    def is_controller(self) -> bool:
        """Controllers are views served under their own URL path, e.g. ``/reviews``."""
        return self._id.startswith("/")

    @property
    def is_widget(self) -> bool:
        return self._is_widget

    @property
    def is_page(self) -> bool:
        return self._is_page

    # Facets

    @property
    def description(self) -> str:
        return self._description

    @property
    def sections(self) -> FrozenSet[str]:
        return self._sections

    @property
    def user_roles(self) -> Tuple[str, ...]:
        return self._user_roles

    @property
    def resource_scopes(self) -> Tuple[str, ...]:
        return self._resource_scopes

    @property
    def resource_qualifiers(self) -> Tuple[str, ...]:
        return self._resource_qualifiers

    @property
    def resource_languages(self) -> Tuple[str, ...]:
        return self._resource_languages

    @property
    def is_default_tab(self) -> bool:
        return self._is_default_tab

    @property
    def default_tab_metrics(self) -> Tuple[str, ...]:
        return self._default_tab_metrics

    @property
    def widget_properties(self) -> Mapping[str, WidgetProperty]:
        return self._widget_properties

    def widget_property(self, key: str) -> Optional[WidgetProperty]:
        return self._widget_properties.get(key)

    @property
    def widget_categories(self) -> Tuple[str, ...]:
        return self._widget_categories

    @property
    def widget_layout(self) -> WidgetLayoutType:
        return self._widget_layout

    @property
    def is_global(self) -> bool:
        return self._is_global

    @property
    def mandatory_measures(self) -> Tuple[str, ...]:
        return self._mandatory_measures

    @property
    def any_of_measures(self) -> Tuple[str, ...]:
        return self._any_of_measures

    # Matching

    def supports_metric(self, metric_key: str) -> bool:
        return metric_key in self._default_tab_metrics

    def accepts_available_measures(self, available_measures: Iterable[str]) -> bool:
        """True if every mandatory measure and at least one any-of measure is available.

        An empty any-of list is satisfied by any set of available measures.
        """
        available = set(available_measures)
        for measure in self._mandatory_measures:
            if measure not in available:
                return False
        if not self._any_of_measures:
            return True
        return any(measure in available for measure in self._any_of_measures)

    def is_editable(self) -> bool:
        return bool(self._widget_properties)

    def has_required_properties(self) -> bool:
        requires = False
        for prop in self._widget_properties.values():
            if prop.is_required:
                requires = True
        return requires

    # Ordering & identity

    @property
    def sort_key(self) -> Tuple[str, str]:
        return (self._title, self._id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ViewDescriptor):
            return NotImplemented
        return self._id == other._id

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ViewDescriptor):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(id={self._id!r}, sections={sorted(self._sections)!r}, "
            f"user_roles={list(self._user_roles)!r}, scopes={list(self._resource_scopes)!r}, "
            f"qualifiers={list(self._resource_qualifiers)!r}, "
            f"languages={list(self._resource_languages)!r}, "
            f"metrics={list(self._default_tab_metrics)!r})"
        )


def _copy(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)
