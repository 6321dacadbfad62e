# cms/theme.py
"""
Presentation shell settings.

The shell does nothing but forward these options to the template layer,
where base.html applies them to the <html> element.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, asdict

from flask import Flask, current_app

from .config import env_bool

THEME_ATTRIBUTES = ("class", "data-theme")


@dataclass(frozen=True)
class ThemeConfig:
    attribute: str = "class"
    default_theme: str = "system"
    enable_system: bool = True
    disable_transition_on_change: bool = False

    def __post_init__(self):
        if self.attribute not in THEME_ATTRIBUTES:
            raise ValueError(
                f"theme attribute must be one of {THEME_ATTRIBUTES}, got {self.attribute!r}"
            )

    @classmethod
    def from_env(cls) -> "ThemeConfig":
        return cls(
            attribute=os.getenv("THEME_ATTRIBUTE", "class"),
            default_theme=os.getenv("THEME_DEFAULT", "system"),
            enable_system=env_bool("THEME_ENABLE_SYSTEM", True),
            disable_transition_on_change=env_bool("THEME_DISABLE_TRANSITION", False),
        )

    def as_provider_props(self) -> dict:
        """Options exactly as given, keyed the way the templates read them."""
        return asdict(self)


def register_theme(app: Flask) -> None:
    """Expose the configured theme to every template as `theme`."""

    @app.context_processor
    def inject_theme():
        theme = current_app.config.get("THEME") or ThemeConfig()
        return {"theme": theme.as_provider_props()}
