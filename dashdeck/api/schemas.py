"""
Pydantic schemas for API response models.

These schemas serialize view descriptors for the rendering layer and
provide the OpenAPI documentation for the console API.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from dashdeck.views.descriptor import ViewDescriptor
from dashdeck.views.metadata import WidgetLayoutType, WidgetPropertyType


class WidgetPropertyResponse(BaseModel):
    """A configuration slot exposed by a widget."""
    key: str
    type: WidgetPropertyType
    default_value: Optional[str] = None
    optional: bool = True
    required: bool = Field(False, description="Not optional and without a default value")
    description: str = ""
    options: List[str] = Field(default_factory=list)


class ViewSummary(BaseModel):
    """Lightweight summary for listing endpoints."""
    id: str
    title: str
    kind: str = Field(..., description="'page' or 'widget'")
    description: str = ""
    sections: List[str] = Field(default_factory=list)
    is_default_tab: bool = False
    is_global: bool = False
    is_editable: bool = False

    @classmethod
    def from_descriptor(cls, view: ViewDescriptor) -> "ViewSummary":
        return cls(
            id=view.id,
            title=view.title,
            kind="widget" if view.is_widget else "page",
            description=view.description,
            sections=sorted(view.sections),
            is_default_tab=view.is_default_tab,
            is_global=view.is_global,
            is_editable=view.is_editable(),
        )


class ViewDetail(ViewSummary):
    """Every facet of a view descriptor."""
    is_controller: bool = False
    user_roles: List[str] = Field(default_factory=list)
    resource_scopes: List[str] = Field(default_factory=list)
    resource_qualifiers: List[str] = Field(default_factory=list)
    resource_languages: List[str] = Field(default_factory=list)
    default_tab_metrics: List[str] = Field(default_factory=list)
    widget_categories: List[str] = Field(default_factory=list)
    widget_layout: WidgetLayoutType = WidgetLayoutType.DEFAULT
    widget_properties: List[WidgetPropertyResponse] = Field(default_factory=list)
    has_required_properties: bool = False
    mandatory_measures: List[str] = Field(default_factory=list)
    any_of_measures: List[str] = Field(default_factory=list)

    @classmethod
    def from_descriptor(cls, view: ViewDescriptor) -> "ViewDetail":
        summary = ViewSummary.from_descriptor(view)
        return cls(
            **summary.model_dump(),
            is_controller=view.is_controller,
            user_roles=list(view.user_roles),
            resource_scopes=list(view.resource_scopes),
            resource_qualifiers=list(view.resource_qualifiers),
            resource_languages=list(view.resource_languages),
            default_tab_metrics=list(view.default_tab_metrics),
            widget_categories=list(view.widget_categories),
            widget_layout=view.widget_layout,
            widget_properties=[
                WidgetPropertyResponse(
                    key=p.key,
                    type=p.type,
                    default_value=p.default_value,
                    optional=p.optional,
                    required=p.is_required,
                    description=p.description,
                    options=list(p.options),
                )
                for p in sorted(view.widget_properties.values(), key=lambda p: p.key)
            ],
            has_required_properties=view.has_required_properties(),
            mandatory_measures=list(view.mandatory_measures),
            any_of_measures=list(view.any_of_measures),
        )


class ExtensionStatus(BaseModel):
    """Discovery and load state of one extension."""
    id: str
    root: str
    module: str
    enabled: bool
    source: str
    grants: List[str] = Field(default_factory=list)
    status: dict = Field(default_factory=dict)
