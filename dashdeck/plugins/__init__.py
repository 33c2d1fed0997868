from .base import Extension, Capability, ExtensionInfo, VIEW_CAPABILITIES

__all__ = [
    "Extension",
    "Capability",
    "ExtensionInfo",
    "VIEW_CAPABILITIES",
]
