"""
Shared reference data for line items: work categories, payment milestones
and the room presets offered when starting a project.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

# Keep tuple structure to preserve order for display and prompts
CATEGORIES: Tuple[str, ...] = (
    "Initial Deposit_Project Start",
    "Site Prep / Demolition",
    "Structural / Framing",
    "Foundation / Concrete",
    "Roofing",
    "Exterior Envelope",
    "Windows / Doors",
    "MEP Rough",
    "Insulation",
    "Drywall / Interior",
    "Finishes (Paint, Trim)",
    "Cabinets / Millwork",
    "Fixtures / Faucets",
    "Appliances",
    "Tile / Stone",
    "Landscaping",
    "Permits / Fees",
    "Cleanup",
    "Custom Work",
)

FALLBACK_CATEGORY = "Custom Work"

PAYMENT_TERMS: Tuple[str, ...] = (
    "Upon contract signing",
    "Upon completion of previous phase",
    "Upon passing rough inspection",
    "Upon final approval",
)

CATEGORY_DESCRIPTIONS: Dict[str, str] = {
    "Initial Deposit_Project Start": "Upfront payment to secure scheduling and mobilize resources.",
    "Site Prep / Demolition": "Clearing site, removing old structures, and preparing for construction.",
    "Structural / Framing": "Building the skeleton, walls, floors, and roof support systems.",
    "Foundation / Concrete": "Pouring footings, slabs, and structural concrete elements.",
    "Roofing": "Installing roof covering, flashing, and weatherproofing materials.",
    "Exterior Envelope": "Siding, stucco, weather barriers, and exterior trim installation.",
    "Windows / Doors": "Installation of exterior and interior doors and window units.",
    "MEP Rough": "Rough installation of mechanical, electrical, and plumbing systems.",
    "Insulation": "Thermal and sound insulation in walls, ceilings, and floors.",
    "Drywall / Interior": "Hanging, taping, and texturing drywall for interior walls.",
    "Finishes (Paint, Trim)": "Painting, staining, and installing baseboards, crown molding, and casings.",
    "Cabinets / Millwork": "Installation of cabinetry, shelving, and custom woodwork.",
    "Fixtures / Faucets": "Installing sinks, toilets, lights, and plumbing trim.",
    "Appliances": "Placement and connection of kitchen and laundry appliances.",
    "Tile / Stone": "Laying ceramic, porcelain, or natural stone on floors/walls.",
    "Landscaping": "Planting, irrigation, hardscaping, and outdoor improvements.",
    "Permits / Fees": "City permits, inspections, and administrative costs.",
    "Cleanup": "Final site cleaning and debris removal.",
    "Custom Work": "Specialized tasks or unique requirements not covered by standard categories.",
}

DEFAULT_ROOMS: Tuple[str, ...] = (
    "Kitchen",
    "Master Bath",
    "Guest Bath",
    "Living Room",
    "Dining Room",
    "Bedroom",
    "Hallway",
    "Garage",
)

DEFAULT_ECO_PROFIT = 20.0
DEFAULT_UNIT = "ea"


def _compress(value: str) -> str:
    return "".join(value.split()).lower()


def _match(value: Optional[str], choices: Tuple[str, ...]) -> Optional[str]:
    if not value:
        return None
    candidate = str(value).strip()
    if candidate in choices:
        return candidate
    compressed = _compress(candidate)
    for choice in choices:
        if compressed == _compress(choice):
            return choice
    return None


def normalize_category(value: Optional[str]) -> str:
    """
    Map a category string onto the canonical list.

    Accepts the exact label or a variant differing only in case/whitespace.
    Anything else becomes ``"Custom Work"``.
    """

    return _match(value, CATEGORIES) or FALLBACK_CATEGORY


def normalize_payment_term(value: Optional[str]) -> str:
    """Map a payment milestone onto ``PAYMENT_TERMS``, defaulting to the first term."""

    return _match(value, PAYMENT_TERMS) or PAYMENT_TERMS[0]


def display_description(item) -> str:
    """Return the client-facing description for a line item."""

    if item.description:
        return item.description
    return CATEGORY_DESCRIPTIONS.get(item.category) or item.category


__all__ = [
    "CATEGORIES",
    "CATEGORY_DESCRIPTIONS",
    "DEFAULT_ECO_PROFIT",
    "DEFAULT_ROOMS",
    "DEFAULT_UNIT",
    "FALLBACK_CATEGORY",
    "PAYMENT_TERMS",
    "display_description",
    "normalize_category",
    "normalize_payment_term",
]
