"""
WLED Asset Packer - Python Tools

This package turns the web UI sources into the C headers compiled into
the firmware.

Modules:
    specs   - Asset specs, render methods and project render context
    filters - Version/repository substitution and minification filters
    inline  - Inlines stylesheets, scripts and images into one HTML page
    render  - Hexdump, gzip and the header chunk writers
    pages   - Asset tables for html_ui.h, html_settings.h and html_other.h
    cli     - Command line entry point (build and watch mode)
"""

__version__ = "1.0.0"


class PackError(RuntimeError):
    """Raised when the packer cannot produce a required output."""


class InlineError(PackError):
    """Raised when a resource referenced by the main page cannot be inlined."""


class MarkupError(PackError, ValueError):
    """Raised when markup is too broken to be minified safely."""
