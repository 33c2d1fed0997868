from __future__ import annotations

from dataclasses import dataclass
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

from dashdeck.errors import DuplicateViewError, RegistryFrozenError
from dashdeck.observability.logging import registry_logger
from dashdeck.plugins.base import Extension
from dashdeck.views.descriptor import ViewDescriptor
from dashdeck.views.metadata import MetadataResolver, NavigationSection


@dataclass(frozen=True)
class ResourceContext:
    """The resource a page or widget is being selected for.

    A None field matches every view.
    """
    scope: Optional[str] = None
    qualifier: Optional[str] = None
    language: Optional[str] = None


def _accepts(value: Optional[str], declared: Sequence[str]) -> bool:
    return value is None or not declared or value in declared


def applies_to(descriptor: ViewDescriptor, resource: Optional[ResourceContext]) -> bool:
    """True if the descriptor does not restrict away the given resource."""
    if resource is None:
        return True
    return (
        _accepts(resource.scope, descriptor.resource_scopes)
        and _accepts(resource.qualifier, descriptor.resource_qualifiers)
        and _accepts(resource.language, descriptor.resource_languages)
    )


class ViewRegistry:
    """Registry of view descriptors built from loaded extensions.

    Descriptors are keyed by extension id. Selection methods always return
    descriptors in their natural (title, id) order.

    Freezing closes registration to new ids. An id registered before the
    freeze may still be registered again after it was unregistered, so
    extensions can be reloaded.
    """

    def __init__(self) -> None:
        self._views: Dict[str, ViewDescriptor] = {}
        self._known: Set[str] = set()
        self._lock = RLock()
        self._frozen = False

    def register(self, extension: Extension, resolver: Optional[MetadataResolver] = None) -> ViewDescriptor:
        descriptor = ViewDescriptor(extension, resolver)
        with self._lock:
            if self._frozen and descriptor.id not in self._known:
                raise RegistryFrozenError("ViewRegistry is frozen; registration is closed")
            if descriptor.id in self._views:
                raise DuplicateViewError(descriptor.id)
            self._views[descriptor.id] = descriptor
            self._known.add(descriptor.id)
        registry_logger.view_registered(
            view_id=descriptor.id,
            kind="widget" if descriptor.is_widget else "page",
            title=descriptor.title,
            sections=sorted(descriptor.sections),
        )
        return descriptor

    def unregister(self, view_id: str) -> Optional[ViewDescriptor]:
        with self._lock:
            descriptor = self._views.pop(view_id, None)
        if descriptor is not None:
            registry_logger.view_unregistered(view_id)
        return descriptor

    def get(self, view_id: str) -> ViewDescriptor:
        with self._lock:
            return self._views[view_id]

    def find(self, view_id: str) -> Optional[ViewDescriptor]:
        with self._lock:
            return self._views.get(view_id)

    def all(self) -> List[ViewDescriptor]:
        with self._lock:
            return sorted(self._views.values())

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    def __len__(self) -> int:
        with self._lock:
            return len(self._views)

    def __contains__(self, view_id: object) -> bool:
        with self._lock:
            return view_id in self._views

    def _select(self, predicate: Callable[[ViewDescriptor], bool]) -> List[ViewDescriptor]:
        return [d for d in self.all() if predicate(d)]

    def pages(
        self,
        section: Optional[str] = None,
        resource: Optional[ResourceContext] = None,
        available_measures: Optional[Iterable[str]] = None,
    ) -> List[ViewDescriptor]:
        measures = None if available_measures is None else set(available_measures)
        return self._select(
            lambda d: d.is_page
            and (section is None or section in d.sections)
            and applies_to(d, resource)
            and (measures is None or d.accepts_available_measures(measures))
        )

    def widgets(
        self,
        resource: Optional[ResourceContext] = None,
        available_measures: Optional[Iterable[str]] = None,
        global_only: Optional[bool] = None,
    ) -> List[ViewDescriptor]:
        measures = None if available_measures is None else set(available_measures)
        return self._select(
            lambda d: d.is_widget
            and applies_to(d, resource)
            and (measures is None or d.accepts_available_measures(measures))
            and (global_only is None or d.is_global == global_only)
        )

    def default_tab(
        self,
        resource: Optional[ResourceContext] = None,
        metric: Optional[str] = None,
    ) -> Optional[ViewDescriptor]:
        """Pick the resource tab to open first.

        A tab declared as default for ``metric`` wins over a tab declared
        as default for every metric.
        """
        tabs = self.pages(section=NavigationSection.RESOURCE_TAB, resource=resource)
        if metric is not None:
            for tab in tabs:
                if tab.supports_metric(metric):
                    return tab
        for tab in tabs:
            if tab.is_default_tab:
                return tab
        return None
