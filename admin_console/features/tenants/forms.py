"""Local validation for the tenant create and edit forms."""

import re
from typing import Any, Dict, List, Optional, Sequence

from admin_console.models.tenant import TenantAddress, TenantContact

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

NAME_MIN = 3
NAME_MAX = 100


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value))


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def validate_tenant_name(name: Optional[str]) -> Optional[str]:
    if _blank(name):
        return "Tenant name is required"
    if len(name) < NAME_MIN:
        return f"Tenant name must be at least {NAME_MIN} characters"
    if len(name) > NAME_MAX:
        return f"Tenant name must be less than {NAME_MAX} characters"
    return None


def record_key(record_id: Any, index: int) -> str:
    """Errors for unsaved records are keyed by position."""
    return str(record_id) if record_id not in (None, "") else f"temp-{index}"


def validate_addresses(addresses: Sequence[TenantAddress]) -> Dict[str, Dict[str, str]]:
    errors: Dict[str, Dict[str, str]] = {}
    for index, address in enumerate(addresses):
        problems: Dict[str, str] = {}
        if _blank(address.line1):
            problems["line1"] = "Address line 1 is required"
        if _blank(address.city):
            problems["city"] = "City is required"
        if _blank(address.country_code):
            problems["country_code"] = "Country is required"
        if problems:
            errors[record_key(address.id, index)] = problems
    return errors


def validate_contacts(contacts: Sequence[TenantContact]) -> Dict[str, Dict[str, str]]:
    errors: Dict[str, Dict[str, str]] = {}
    for index, contact in enumerate(contacts):
        problems: Dict[str, str] = {}
        if _blank(contact.full_name):
            problems["full_name"] = "Contact name is required"
        if contact.email and not is_valid_email(contact.email):
            problems["email"] = "Invalid email format"
        if problems:
            errors[record_key(contact.id, index)] = problems
    return errors


def validate_tenant_edit(
    name: Optional[str],
    addresses: List[TenantAddress],
    contacts: List[TenantContact],
) -> Dict[str, Any]:
    """All field errors of the edit screen; empty when the form may be saved."""
    errors: Dict[str, Any] = {}

    name_error = validate_tenant_name(name)
    if name_error:
        errors["name"] = name_error

    if not addresses:
        errors["addresses"] = "At least one address is required"
    else:
        address_errors = validate_addresses(addresses)
        if address_errors:
            errors["address_errors"] = address_errors

    contact_errors = validate_contacts(contacts)
    if contact_errors:
        errors["contact_errors"] = contact_errors
    return errors


def validate_tenant_create(name: Optional[str], subdomain: Optional[str], timezone: Optional[str]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    name_error = validate_tenant_name((name or "").strip())
    if name_error:
        errors["name"] = name_error
    if _blank(subdomain):
        errors["subdomain"] = "Subdomain is required"
    if _blank(timezone):
        errors["timezone"] = "Timezone is required"
    return errors
