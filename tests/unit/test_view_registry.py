#!/usr/bin/env python3
"""
Unit tests for the view registry and its selection methods.
"""

import pytest

from dashdeck.errors import DuplicateViewError, InvalidWidgetScopeError, RegistryFrozenError
from dashdeck.views.metadata import (
    DefaultTab,
    Facet,
    NavigationSection,
    RequiredMeasures,
)
from dashdeck.views.registry import ResourceContext, ViewRegistry, applies_to


@pytest.fixture
def registry(make_extension, make_widget):
    reg = ViewRegistry()
    reg.register(make_extension(id="home", title="Home"))
    reg.register(make_extension(id="settings", title="Settings", metadata={
        Facet.NAVIGATION_SECTION: [NavigationSection.CONFIGURATION],
        Facet.USER_ROLE: ["admin"],
    }))
    reg.register(make_extension(id="coverage", title="Coverage", metadata={
        Facet.NAVIGATION_SECTION: [NavigationSection.RESOURCE_TAB],
        Facet.DEFAULT_TAB: DefaultTab(metrics=("coverage", "line_coverage")),
        Facet.RESOURCE_QUALIFIER: ["FIL", "CLA"],
    }))
    reg.register(make_extension(id="source", title="Source", metadata={
        Facet.NAVIGATION_SECTION: [NavigationSection.RESOURCE_TAB],
        Facet.DEFAULT_TAB: DefaultTab(),
    }))
    reg.register(make_widget(id="size", title="Size", metadata={
        Facet.REQUIRED_MEASURES: RequiredMeasures(all_of=("ncloc",)),
    }))
    reg.register(make_widget(id="hotspots", title="Hotspots", metadata={
        Facet.WIDGET_SCOPE: ["GLOBAL"],
        Facet.RESOURCE_LANGUAGE: ["java"],
    }))
    return reg


@pytest.mark.unit
class TestRegistration:

    def test_register_returns_descriptor(self, make_extension):
        reg = ViewRegistry()
        view = reg.register(make_extension(id="home"))

        assert view.id == "home"
        assert "home" in reg
        assert len(reg) == 1
        assert reg.get("home") is view

    def test_duplicate_id_rejected(self, make_extension):
        reg = ViewRegistry()
        reg.register(make_extension(id="home", title="Home"))

        with pytest.raises(DuplicateViewError):
            reg.register(make_extension(id="home", title="Other"))
        assert reg.get("home").title == "Home"

    def test_frozen_registry_rejects_registration(self, make_extension):
        reg = ViewRegistry()
        reg.freeze()

        with pytest.raises(RegistryFrozenError):
            reg.register(make_extension())

    def test_frozen_registry_accepts_reregistration(self, make_extension):
        reg = ViewRegistry()
        reg.register(make_extension(id="home", title="Home"))
        reg.freeze()

        reg.unregister("home")
        view = reg.register(make_extension(id="home", title="Home v2"))

        assert reg.get("home") is view
        with pytest.raises(RegistryFrozenError):
            reg.register(make_extension(id="late"))

    def test_failed_build_leaves_registry_untouched(self, make_widget):
        reg = ViewRegistry()

        with pytest.raises(InvalidWidgetScopeError):
            reg.register(make_widget(metadata={Facet.WIDGET_SCOPE: ["TEAM"]}))
        assert len(reg) == 0

    def test_unregister(self, registry):
        removed = registry.unregister("home")

        assert removed.id == "home"
        assert "home" not in registry
        assert registry.unregister("home") is None
        assert registry.find("home") is None

    def test_get_unknown_raises(self):
        with pytest.raises(KeyError):
            ViewRegistry().get("nope")

    def test_all_is_sorted(self, registry):
        assert [v.title for v in registry.all()] == [
            "Coverage", "Home", "Hotspots", "Settings", "Size", "Source",
        ]


@pytest.mark.unit
class TestPageSelection:

    def test_pages_exclude_widgets(self, registry):
        assert [v.id for v in registry.pages()] == ["coverage", "home", "settings", "source"]

    def test_pages_by_section(self, registry):
        assert [v.id for v in registry.pages(section=NavigationSection.HOME)] == ["home"]
        assert [v.id for v in registry.pages(section=NavigationSection.RESOURCE_TAB)] == ["coverage", "source"]

    def test_pages_by_resource(self, registry):
        on_file = registry.pages(section=NavigationSection.RESOURCE_TAB, resource=ResourceContext(qualifier="FIL"))
        on_project = registry.pages(section=NavigationSection.RESOURCE_TAB, resource=ResourceContext(qualifier="TRK"))

        assert [v.id for v in on_file] == ["coverage", "source"]
        assert [v.id for v in on_project] == ["source"]

    def test_roles_are_exposed_not_enforced(self, registry):
        settings = registry.pages(section=NavigationSection.CONFIGURATION)[0]
        assert settings.user_roles == ("admin",)


@pytest.mark.unit
class TestWidgetSelection:

    def test_widgets(self, registry):
        assert [v.id for v in registry.widgets()] == ["hotspots", "size"]

    def test_widgets_by_measures(self, registry):
        assert [v.id for v in registry.widgets(available_measures=["ncloc"])] == ["hotspots", "size"]
        assert [v.id for v in registry.widgets(available_measures=[])] == ["hotspots"]

    def test_widgets_by_scope(self, registry):
        assert [v.id for v in registry.widgets(global_only=True)] == ["hotspots"]
        assert [v.id for v in registry.widgets(global_only=False)] == ["size"]

    def test_widgets_by_language(self, registry):
        assert [v.id for v in registry.widgets(resource=ResourceContext(language="py"))] == ["size"]
        assert [v.id for v in registry.widgets(resource=ResourceContext(language="java"))] == ["hotspots", "size"]


@pytest.mark.unit
class TestDefaultTab:

    def test_metric_specific_tab_wins(self, registry):
        assert registry.default_tab(metric="coverage").id == "coverage"

    def test_falls_back_to_default_for_all(self, registry):
        assert registry.default_tab(metric="complexity").id == "source"
        assert registry.default_tab().id == "source"

    def test_resource_restrictions_apply(self, registry):
        tab = registry.default_tab(resource=ResourceContext(qualifier="TRK"), metric="coverage")
        assert tab.id == "source"

    def test_none_when_no_tab(self, make_extension):
        reg = ViewRegistry()
        reg.register(make_extension(id="home"))
        assert reg.default_tab() is None


@pytest.mark.unit
class TestAppliesTo:

    def test_unrestricted_view_applies_everywhere(self, registry):
        view = registry.get("home")
        assert applies_to(view, ResourceContext(scope="PRJ", qualifier="TRK", language="java"))

    def test_no_resource_applies(self, registry):
        assert applies_to(registry.get("coverage"), None)

    def test_unknown_context_fields_match(self, registry):
        assert applies_to(registry.get("coverage"), ResourceContext(scope="FIL"))
