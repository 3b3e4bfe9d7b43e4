# =============================================================================
# core/mapping.py - Row <-> Entity Mapping
# =============================================================================
# Pure functions translating between storage rows (snake_case columns,
# nullable values, booleans that may come back as strings, child collections
# embedded as lists) and the API entities in core/models.
#
# Reading (row -> entity):
# - Missing or null child collections read as empty lists
# - Photo/logo rows with a blank URL are dropped
# - Team members are ordered leads first, then by name
# - Priority equipment is derived from the equipment rows' is_priority flag
#
# Writing (entity -> rows):
# - base_row() copies only the named base fields; names are column names
# - *_rows() helpers build child rows without the parent key; the child
#   collection replacer tags each row with its parent id
# =============================================================================

from typing import Any, Iterable

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.exceptions import RowMappingError
from core.models.lab import Lab, normalize_tier
from core.models.team import Team

# Boolean strings accepted from storage (compared lowercase)
TRUE_STRINGS = frozenset({"true", "t", "1", "yes", "y"})
FALSE_STRINGS = frozenset({"false", "f", "0", "no", "n"})


# =============================================================================
# Scalar normalization
# =============================================================================

def parse_boolean(value: Any, fallback: bool = False) -> bool:
    """
    Normalize a stored boolean.

    Args:
        value: bool, int 0/1, or one of TRUE_STRINGS / FALSE_STRINGS
        fallback: Returned when value is None

    Returns:
        The boolean value

    Raises:
        ValueError: For any other value; bad data is surfaced, not defaulted
    """
    if value is None:
        return fallback
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_STRINGS:
            return True
        if normalized in FALSE_STRINGS:
            return False
    raise ValueError(f"Unrecognized boolean value: {value!r}")


def parse_rating(value: Any) -> float:
    """Ratings may be stored as numeric or text; unparseable reads as 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _children(row: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = row.get(key)
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _media(items: list[dict[str, Any]]) -> list[dict[str, str]]:
    return [
        {"name": item.get("name") or "", "url": item["url"]}
        for item in items
        if (item.get("url") or "").strip()
    ]


def _equipment(items: list[dict[str, Any]]) -> tuple[list[str], list[str]]:
    equipment: list[str] = []
    priority: list[str] = []
    for item in items:
        name = item.get("item")
        if not name:
            continue
        equipment.append(name)
        if parse_boolean(item.get("is_priority"), False):
            priority.append(name)
    return equipment, priority


def _build(model: type[BaseModel], table: str, row: dict[str, Any], data: dict[str, Any]):
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise RowMappingError(table, row.get("id"), str(exc)) from exc


# =============================================================================
# Row -> Entity
# =============================================================================

def lab_from_row(row: dict[str, Any]) -> Lab:
    """
    Convert a labs row (with embedded child tables) into a Lab.

    Raises:
        RowMappingError: If the row holds values that can't be normalized
    """
    try:
        equipment, priority = _equipment(_children(row, "lab_equipment"))
        data = {
            "id": int(row["id"]),
            "name": row.get("name"),
            "lab_manager": row.get("lab_manager"),
            "contact_email": (row.get("contact_email") or "").strip(),
            "owner_user_id": row.get("owner_user_id") or None,
            "siret_number": row.get("siret_number") or None,
            "logo_url": row.get("logo_url") or None,
            "description_short": row.get("description_short") or None,
            "description_long": row.get("description_long") or None,
            "field": row.get("field") or None,
            "offers_lab_space": parse_boolean(row.get("offers_lab_space"), False),
            "address_line1": row.get("address_line1") or None,
            "address_line2": row.get("address_line2") or None,
            "city": row.get("city") or None,
            "state": row.get("state") or None,
            "postal_code": row.get("postal_code") or None,
            "country": row.get("country") or None,
            "website": row.get("website") or None,
            "linkedin": row.get("linkedin") or None,
            "hal_structure_id": row.get("hal_structure_id") or None,
            "hal_person_id": row.get("hal_person_id") or None,
            "is_verified": parse_boolean(row.get("is_verified"), False),
            "is_visible": parse_boolean(row.get("is_visible"), True),
            "price_privacy": parse_boolean(row.get("price_privacy"), False),
            "minimum_stay": row.get("minimum_stay") or "",
            "rating": parse_rating(row.get("rating")),
            "subscription_tier": normalize_tier(row.get("subscription_tier")),
            "photos": _media(_children(row, "lab_photos")),
            "partner_logos": _media(_children(row, "lab_partner_logos")),
            "compliance": [item.get("label") for item in _children(row, "lab_compliance_labels")],
            "compliance_docs": [
                {"name": item.get("name"), "url": item.get("url")}
                for item in _children(row, "lab_compliance_docs")
            ],
            "publications": [
                {"title": item.get("title"), "url": item.get("url")}
                for item in _children(row, "lab_publications")
            ],
            "patents": [
                {"title": item.get("title"), "url": item.get("url")}
                for item in _children(row, "lab_patents")
            ],
            "equipment": equipment,
            "priority_equipment": priority,
            "focus_areas": [item.get("focus_area") for item in _children(row, "lab_focus_areas")],
            "offers": [item.get("offer") for item in _children(row, "lab_offers")],
        }
    except (KeyError, TypeError, ValueError) as exc:
        raise RowMappingError("labs", row.get("id"), str(exc)) from exc

    return _build(Lab, "labs", row, data)


def _member_sort_key(member: dict[str, Any]) -> tuple[int, str]:
    return (0 if member["is_lead"] else 1, (member["name"] or "").lower())


def team_from_row(row: dict[str, Any]) -> Team:
    """
    Convert a teams row (with embedded child tables) into a Team.

    Linked labs come from lab_team_links; a link whose lab row is gone still
    contributes its lab_id but no summary.

    Raises:
        RowMappingError: If the row holds values that can't be normalized
    """
    try:
        equipment, priority = _equipment(_children(row, "team_equipment"))

        members = [
            {
                "id": member.get("id"),
                "name": member.get("name"),
                "role": member.get("role"),
                "email": member.get("email") or None,
                "linkedin": member.get("linkedin") or None,
                "website": member.get("website") or None,
                "is_lead": parse_boolean(member.get("is_lead"), False),
            }
            for member in _children(row, "team_members")
        ]
        members.sort(key=_member_sort_key)

        links = _children(row, "lab_team_links")
        lab_ids = []
        labs = []
        for link in links:
            if link.get("lab_id") is not None:
                lab_ids.append(int(link["lab_id"]))
            lab = link.get("labs")
            if isinstance(lab, dict):
                labs.append({
                    "id": int(lab["id"]),
                    "name": lab.get("name"),
                    "city": lab.get("city"),
                    "country": lab.get("country"),
                    "logo_url": lab.get("logo_url"),
                    "subscription_tier": lab.get("subscription_tier"),
                })

        data = {
            "id": int(row["id"]),
            "name": row.get("name"),
            "description_short": row.get("description_short"),
            "description_long": row.get("description_long"),
            "owner_user_id": row.get("owner_user_id"),
            "logo_url": row.get("logo_url"),
            "website": row.get("website"),
            "linkedin": row.get("linkedin"),
            "field": row.get("field"),
            "is_visible": parse_boolean(row.get("is_visible"), True),
            "equipment": equipment,
            "priority_equipment": priority,
            "techniques": [
                {"name": item.get("name"), "description": item.get("description") or None}
                for item in _children(row, "team_techniques")
            ],
            "focus_areas": [item.get("focus_area") for item in _children(row, "team_focus_areas")],
            "members": members,
            "lab_ids": lab_ids,
            "labs": labs,
            "photos": _media(_children(row, "team_photos")),
        }
    except (KeyError, TypeError, ValueError) as exc:
        raise RowMappingError("teams", row.get("id"), str(exc)) from exc

    return _build(Team, "teams", row, data)


# =============================================================================
# Entity -> Rows
# =============================================================================

def base_row(
    entity: BaseModel,
    fields: Iterable[str],
    defaults: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the base-table row for the named fields only.

    Field names are column names. Enum values are stored as their text;
    None is replaced by the column default where one is defined.

    Example:
        base_row(patch, {"name", "is_visible"})
        # {"name": "Lab Y", "is_visible": False}
    """
    defaults = defaults or {}
    row: dict[str, Any] = {}
    for field in fields:
        value = getattr(entity, field, None)
        if value is None and field in defaults:
            value = defaults[field]
        if hasattr(value, "value"):
            value = value.value
        row[field] = value
    return row


def media_rows(items: Iterable[Any]) -> list[dict[str, Any]]:
    return [{"name": item.name, "url": item.url} for item in items]


def document_rows(items: Iterable[Any]) -> list[dict[str, Any]]:
    return [{"title": item.title, "url": item.url} for item in items]


def value_rows(values: Iterable[Any], column: str) -> list[dict[str, Any]]:
    """One row per scalar value, e.g. focus areas or compliance labels."""
    return [{column: getattr(value, "value", value)} for value in values]


def equipment_rows(equipment: Iterable[str], priority: Iterable[str]) -> list[dict[str, Any]]:
    """
    Equipment rows with their priority flag.

    The flag is a membership test against the priority list, so a priority
    entry that is not in the equipment list is never stored.
    """
    priority_set = set(priority or [])
    return [{"item": item, "is_priority": item in priority_set} for item in equipment]


def member_rows(members: Iterable[Any]) -> list[dict[str, Any]]:
    return [
        {
            "name": member.name,
            "role": member.role,
            "email": member.email,
            "linkedin": member.linkedin,
            "website": member.website,
            "is_lead": bool(member.is_lead),
        }
        for member in members
    ]


def technique_rows(techniques: Iterable[Any]) -> list[dict[str, Any]]:
    return [
        {"name": technique.name, "description": technique.description}
        for technique in techniques
    ]
