"""Tests for pst_stream.vcard."""

from __future__ import annotations

from datetime import datetime, timezone

from tests.conftest import _build_contact

from pst_schema import EmailFields, ExtraField
from pst_stream.vcard import write_vcard


def _lines(card: str) -> list[str]:
    return card.rstrip("\n").split("\n")


class TestVcardStructure:
    def test_minimal_card(self):
        card = write_vcard(_build_contact(fullname="John Doe", surname="Doe", first_name="John"))
        assert _lines(card) == [
            "BEGIN:VCARD",
            "FN:John Doe",
            "N:Doe;John;;;",
            "VERSION: 3.0",
            "END:VCARD",
        ]
        assert card.endswith("END:VCARD\n\n")

    def test_empty_contact_still_has_fn_and_n(self):
        card = write_vcard(_build_contact())
        assert "FN:\n" in card
        assert "N:;;;;\n" in card

    def test_values_escaped(self):
        card = write_vcard(_build_contact(fullname="Doe, John; Jr.", nickname="back\\slash"))
        assert "FN:Doe\\, John\\; Jr.\n" in card
        assert "NICKNAME:back\\\\slash\n" in card

    def test_emails_and_birthday(self):
        card = write_vcard(
            _build_contact(
                address1="john@example.com",
                address3="jd@example.org",
                birthday=datetime(1980, 5, 17, tzinfo=timezone.utc),
            )
        )
        assert _lines(card)[3:6] == [
            "EMAIL:john@example.com",
            "EMAIL:jd@example.org",
            "BDAY:1980-05-17T00:00:00Z",
        ]


class TestVcardAddressesAndPhones:
    def test_business_address(self):
        card = write_vcard(
            _build_contact(
                business_street="1 Main St",
                business_city="Springfield",
                business_state="IL",
                business_postal_code="62701",
                business_country="USA",
                business_address="1 Main St\nSpringfield, IL 62701",
            )
        )
        assert "ADR;TYPE=work:;;1 Main St;Springfield;IL;62701;USA\n" in card
        assert "LABEL;TYPE=work:1 Main St\\nSpringfield\\, IL 62701\n" in card

    def test_address_class_needs_label_text(self):
        card = write_vcard(_build_contact(home_street="2 Elm St"))
        assert "ADR" not in card

    def test_phone_type_tags(self):
        card = write_vcard(
            _build_contact(
                mobile_phone="+1 555 0100",
                business_fax="+1 555 0101",
                telex="12345",
            )
        )
        tels = [line for line in _lines(card) if line.startswith("TEL")]
        assert tels == [
            "TEL;TYPE=work,fax:+1 555 0101",
            "TEL;TYPE=cell,voice:+1 555 0100",
            "TEL;TYPE=bbs:12345",
        ]


class TestVcardOrganisation:
    def test_work_fields(self):
        card = write_vcard(
            _build_contact(job_title="Engineer", profession="Software", company_name="Example, Inc.")
        )
        assert "TITLE:Engineer\n" in card
        assert "ROLE:Software\n" in card
        assert "ORG:Example\\, Inc.\n" in card

    def test_agent_is_inline_vcard(self):
        card = write_vcard(_build_contact(assistant_name="Jane", assistant_phone="555-0199"))
        assert "AGENT:BEGIN:VCARD\\nFN:Jane\\nTEL:555-0199\\nEND:VCARD\n" in card

    def test_notes_and_categories(self):
        item = _build_contact(fullname="X")
        item.comment = "met at conf"
        item.body = "line one\r\nline two"
        item.extra_fields = [
            ExtraField(name="Keywords", value="friends"),
            ExtraField(name="Other", value="ignored"),
            ExtraField(name="Keywords", value="work,2024"),
        ]
        lines = _lines(write_vcard(item))
        assert lines[-5:] == [
            "NOTE:met at conf",
            "NOTE:line one\\nline two",
            "CATEGORIES:friends,work\\,2024",
            "VERSION: 3.0",
            "END:VCARD",
        ]

    def test_byte_note_decoded_with_body_charset(self):
        item = _build_contact(fullname="X")
        item.body = "Café Straße".encode("cp1252")
        item.email = EmailFields(body_charset="cp1252")
        assert "NOTE:Café Straße" in _lines(write_vcard(item))
