"""RFC 2426 vCard serializer for contact items."""

from __future__ import annotations

from pst_schema import ArchiveItem, ContactFields

from .rfc import rfc2425_datetime, rfc2426_escape, to_text

# (label, field prefix) per address class; a class is written only when
# its ``<prefix>_address`` label text is set.
ADDRESS_CLASSES = (
    ("home", "home"),
    ("work", "business"),
    ("postal", "other"),
)

# Phone fields in output order with their TEL type tags.
PHONE_FIELDS = (
    ("business_fax", "work,fax"),
    ("business_phone", "work,voice"),
    ("business_phone2", "work,voice"),
    ("car_phone", "car,voice"),
    ("home_fax", "home,fax"),
    ("home_phone", "home,voice"),
    ("home_phone2", "home,voice"),
    ("isdn_phone", "isdn"),
    ("mobile_phone", "cell,voice"),
    ("other_phone", "msg"),
    ("pager_phone", "pager"),
    ("primary_fax", "fax,pref"),
    ("primary_phone", "phone,pref"),
    ("radio_phone", "pcs"),
    ("telex", "bbs"),
)


def _esc(value: str | None) -> str:
    return rfc2426_escape(value) if value else ""


def categories_line(item: ArchiveItem) -> str | None:
    """``CATEGORIES`` line built from the item's ``Keywords`` extra fields."""
    keywords = item.keywords
    if not keywords:
        return None
    return "CATEGORIES:" + ",".join(rfc2426_escape(k) for k in keywords)


def _address_lines(contact: ContactFields) -> list[str]:
    lines = []
    for label, prefix in ADDRESS_CLASSES:
        address = getattr(contact, f"{prefix}_address")
        if not address:
            continue
        parts = [
            _esc(getattr(contact, f"{prefix}_po_box")),
            "",  # extended address
            _esc(getattr(contact, f"{prefix}_street")),
            _esc(getattr(contact, f"{prefix}_city")),
            _esc(getattr(contact, f"{prefix}_state")),
            _esc(getattr(contact, f"{prefix}_postal_code")),
            _esc(getattr(contact, f"{prefix}_country")),
        ]
        lines.append(f"ADR;TYPE={label}:" + ";".join(parts))
        lines.append(f"LABEL;TYPE={label}:{rfc2426_escape(address)}")
    return lines


def _agent_value(contact: ContactFields) -> str:
    # An inline vCard is a single text value: escape it as a whole.
    inner = ["BEGIN:VCARD"]
    if contact.assistant_name:
        inner.append(f"FN:{rfc2426_escape(contact.assistant_name)}")
    if contact.assistant_phone:
        inner.append(f"TEL:{rfc2426_escape(contact.assistant_phone)}")
    inner.append("END:VCARD")
    return rfc2426_escape("\n".join(inner))


def write_vcard(item: ArchiveItem) -> str:
    """Render a contact item as a vCard 3.0 document."""
    contact = item.contact or ContactFields()
    lines = [
        "BEGIN:VCARD",
        f"FN:{_esc(contact.fullname)}",
        "N:" + ";".join(
            _esc(value)
            for value in (
                contact.surname,
                contact.first_name,
                contact.middle_name,
                contact.display_name_prefix,
                contact.suffix,
            )
        ),
    ]

    if contact.nickname:
        lines.append(f"NICKNAME:{rfc2426_escape(contact.nickname)}")
    for address in (contact.address1, contact.address2, contact.address3):
        if address:
            lines.append(f"EMAIL:{rfc2426_escape(address)}")
    if contact.birthday:
        lines.append(f"BDAY:{rfc2425_datetime(contact.birthday)}")

    lines.extend(_address_lines(contact))

    for field, tag in PHONE_FIELDS:
        number = getattr(contact, field)
        if number:
            lines.append(f"TEL;TYPE={tag}:{rfc2426_escape(number)}")

    if contact.job_title:
        lines.append(f"TITLE:{rfc2426_escape(contact.job_title)}")
    if contact.profession:
        lines.append(f"ROLE:{rfc2426_escape(contact.profession)}")
    if contact.assistant_name or contact.assistant_phone:
        lines.append(f"AGENT:{_agent_value(contact)}")
    if contact.company_name:
        lines.append(f"ORG:{rfc2426_escape(contact.company_name)}")
    if item.comment:
        lines.append(f"NOTE:{rfc2426_escape(item.comment)}")
    if item.body:
        charset = item.email.body_charset if item.email else None
        lines.append(f"NOTE:{rfc2426_escape(to_text(item.body, charset))}")

    categories = categories_line(item)
    if categories:
        lines.append(categories)

    lines.append("VERSION: 3.0")
    lines.append("END:VCARD")
    return "\n".join(lines) + "\n\n"
