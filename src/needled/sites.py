"""Rotación de sitios de inyección."""

from __future__ import annotations

from needled.model import InjectionSite

SITE_ROTATION_ORDER: tuple[InjectionSite, ...] = (
    InjectionSite.ABDOMEN_LEFT,
    InjectionSite.ABDOMEN_RIGHT,
    InjectionSite.THIGH_LEFT,
    InjectionSite.THIGH_RIGHT,
    InjectionSite.UPPER_ARM_LEFT,
    InjectionSite.UPPER_ARM_RIGHT,
)

_SITE_LABELS: dict[InjectionSite, str] = {
    InjectionSite.ABDOMEN_LEFT: "Left Abdomen",
    InjectionSite.ABDOMEN_RIGHT: "Right Abdomen",
    InjectionSite.THIGH_LEFT: "Left Thigh",
    InjectionSite.THIGH_RIGHT: "Right Thigh",
    InjectionSite.UPPER_ARM_LEFT: "Left Upper Arm",
    InjectionSite.UPPER_ARM_RIGHT: "Right Upper Arm",
}


def parse_site(value: object) -> InjectionSite | None:
    """Map a raw value (enum or name) to a site; None if unknown."""
    if isinstance(value, InjectionSite):
        return value
    if not isinstance(value, str):
        return None
    try:
        return InjectionSite(value.strip().upper())
    except ValueError:
        return None


def next_site(last_site: InjectionSite | str | None) -> InjectionSite:
    """Next site in the rotation, wrapping around.

    None or an unrecognised site starts again from the first one.
    """
    site = parse_site(last_site)
    if site is None:
        return SITE_ROTATION_ORDER[0]
    idx = SITE_ROTATION_ORDER.index(site)
    return SITE_ROTATION_ORDER[(idx + 1) % len(SITE_ROTATION_ORDER)]


def site_label(site: InjectionSite) -> str:
    """Human-readable label, e.g. ``Left Abdomen``."""
    return _SITE_LABELS[site]
