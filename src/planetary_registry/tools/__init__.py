"""Report and MCP tool layer."""

from .report_tools import (
    format_element_breakdown,
    format_elemental_profile,
    format_events,
    format_house_cusps,
    format_moon_phase,
    format_placements,
    format_registry,
    ReportError
)

__all__ = [
    'format_element_breakdown',
    'format_elemental_profile',
    'format_events',
    'format_house_cusps',
    'format_moon_phase',
    'format_placements',
    'format_registry',
    'ReportError'
]
