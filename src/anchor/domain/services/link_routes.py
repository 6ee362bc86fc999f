"""In-app routes for entity links."""

from anchor.domain.entities import EntityLink, EntityType

LINK_ROUTE_PREFIXES: dict[EntityType, str] = {
    EntityType.ENTRY: "/entries",
    EntityType.MEDICATION: "/medications",
    EntityType.REMINDER: "/reminders",
    EntityType.CONTACT: "/contacts",
    EntityType.MEDICAL_DATA: "/medical-data",
}


def route_for_link(link: EntityLink) -> str:
    """Get the detail-screen route for a linked entity.

    Args:
        link: Entity link span.

    Returns:
        Route such as ``/medications/e1``.
    """
    return f"{LINK_ROUTE_PREFIXES[link.entity_type]}/{link.entity_id}"
