"""Archive item schema — the pre-decoded item tree exposed by an item store."""

from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum

from pydantic import BaseModel, Field


class ItemType(str, Enum):
    """Item type as reported by the store for a decoded record."""

    NOTE = "note"
    SCHEDULE = "schedule"
    REPORT = "report"
    CONTACT = "contact"
    JOURNAL = "journal"
    APPOINTMENT = "appointment"
    FOLDER = "folder"
    OTHER = "other"


class ItemKind(str, Enum):
    """Exhaustive classification tag, decided once per item by :func:`classify`."""

    MESSAGE_STORE = "message_store"
    FOLDER = "folder"
    CONTACT = "contact"
    EMAIL = "email"
    JOURNAL = "journal"
    APPOINTMENT = "appointment"
    UNKNOWN = "unknown"


EMAIL_TYPES = frozenset({ItemType.NOTE, ItemType.SCHEDULE, ItemType.REPORT})


class AttachMethod(str, Enum):
    """How an attachment carries its payload."""

    BY_VALUE = "by_value"
    BY_REFERENCE = "by_reference"
    EMBEDDED = "embedded"
    OLE = "ole"


class FreeBusy(IntEnum):
    """Free/busy state shown for an appointment."""

    FREE = 0
    TENTATIVE = 1
    BUSY = 2
    OUT_OF_OFFICE = 3


class AppointmentLabel(IntEnum):
    """Colour label assigned to an appointment."""

    NONE = 0
    IMPORTANT = 1
    BUSINESS = 2
    PERSONAL = 3
    VACATION = 4
    MUST_ATTEND = 5
    TRAVEL_REQUIRED = 6
    NEEDS_PREPARATION = 7
    BIRTHDAY = 8
    ANNIVERSARY = 9
    PHONE_CALL = 10


class Frequency(IntEnum):
    """Recurrence frequency; the value indexes the RRULE ``FREQ`` table."""

    DAILY = 0
    WEEKLY = 1
    MONTHLY = 2
    YEARLY = 3


class RecurrenceRule(BaseModel):
    """Decoded recurrence pattern of a recurring appointment."""

    frequency: Frequency = Field(description="Recurrence frequency")
    interval: int = Field(default=1, description="Every N periods (1 = every period)")
    count: int = Field(default=0, description="Number of occurrences (0 = unbounded)")
    day_of_month: int = Field(default=0, description="BYMONTHDAY value (0 = unset)")
    month_of_year: int = Field(default=0, description="BYMONTH value (0 = unset)")
    position: int = Field(default=0, description="BYSETPOS value (0 = unset)")
    weekday_mask: int = Field(
        default=0,
        ge=0,
        lt=128,
        description="7-bit weekday mask, Sunday = bit 0 through Saturday = bit 6",
    )


class Attachment(BaseModel):
    """A file or embedded message attached to an item."""

    model_config = {"ser_json_bytes": "base64", "val_json_bytes": "base64"}

    data: bytes | None = Field(default=None, description="Inline attachment bytes")
    blob_id: int | None = Field(
        default=None,
        description="Store id of an externally stored payload (used when data is absent)",
    )
    mimetype: str | None = Field(default=None, description="Declared MIME type")
    filename_short: str | None = Field(default=None, description="8.3 filename")
    filename_long: str | None = Field(default=None, description="Long (UTF-8) filename")
    content_id: str | None = Field(default=None, description="Content-ID without angle brackets")
    method: AttachMethod = Field(default=AttachMethod.BY_VALUE, description="Attach method")
    embedded: ArchiveItem | None = Field(
        default=None,
        description="Pre-decoded embedded message (method == embedded)",
    )


class ExtraField(BaseModel):
    """Named property outside the well-known field set (e.g. ``Keywords``)."""

    name: str
    value: str


class FolderFields(BaseModel):
    item_count: int = Field(default=0, description="Item count reported for the folder")


class EmailFields(BaseModel):
    """Message-specific fields of an email-like item."""

    model_config = {"ser_json_bytes": "base64", "val_json_bytes": "base64"}

    header: str | None = Field(default=None, description="Raw transport header blob")
    sender_address: str | None = None
    sender_name: str | None = Field(default=None, description="Outlook display name of the sender")
    sentto_address: str | None = None
    cc_address: str | None = None
    bcc_address: str | None = None
    messageid: str | None = None
    sent_date: datetime | None = None
    htmlbody: str | bytes | None = None
    report_text: str | bytes | None = None
    rtf_compressed: bytes | None = Field(default=None, description="LZFu-compressed RTF body")
    encrypted_body: bytes | None = None
    encrypted_htmlbody: bytes | None = None
    body_charset: str | None = Field(default=None, description="Best-guess charset of byte bodies")


class ContactFields(BaseModel):
    fullname: str | None = None
    surname: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    display_name_prefix: str | None = None
    suffix: str | None = None
    nickname: str | None = None
    address1: str | None = None
    address2: str | None = None
    address3: str | None = None
    birthday: datetime | None = None

    home_po_box: str | None = None
    home_street: str | None = None
    home_city: str | None = None
    home_state: str | None = None
    home_postal_code: str | None = None
    home_country: str | None = None
    home_address: str | None = None

    business_po_box: str | None = None
    business_street: str | None = None
    business_city: str | None = None
    business_state: str | None = None
    business_postal_code: str | None = None
    business_country: str | None = None
    business_address: str | None = None

    other_po_box: str | None = None
    other_street: str | None = None
    other_city: str | None = None
    other_state: str | None = None
    other_postal_code: str | None = None
    other_country: str | None = None
    other_address: str | None = None

    business_fax: str | None = None
    business_phone: str | None = None
    business_phone2: str | None = None
    car_phone: str | None = None
    home_fax: str | None = None
    home_phone: str | None = None
    home_phone2: str | None = None
    isdn_phone: str | None = None
    mobile_phone: str | None = None
    other_phone: str | None = None
    pager_phone: str | None = None
    primary_fax: str | None = None
    primary_phone: str | None = None
    radio_phone: str | None = None
    telex: str | None = None

    job_title: str | None = None
    profession: str | None = None
    assistant_name: str | None = None
    assistant_phone: str | None = None
    company_name: str | None = None


class JournalFields(BaseModel):
    start: datetime | None = None


class AppointmentFields(BaseModel):
    start: datetime | None = None
    end: datetime | None = None
    location: str | None = None
    showas: FreeBusy | None = Field(default=None, description="Free/busy state")
    label: AppointmentLabel = AppointmentLabel.NONE
    alarm: bool = False
    alarm_minutes: int = Field(default=0, description="Reminder lead time in minutes")
    recurrence: RecurrenceRule | None = Field(
        default=None,
        description="Recurrence pattern; present only for recurring appointments",
    )


class ArchiveItem(BaseModel):
    """One decoded node of the archive tree.

    Variant records (``folder``, ``contact`` …) are populated by the store
    according to what the record carries; :func:`classify` turns the
    combination into a single :class:`ItemKind`.
    """

    item_type: ItemType = Field(default=ItemType.OTHER, description="Store-reported item type")
    display_name: str | None = Field(default=None, description="'File as' name of the item")
    subject: str | None = None
    body: str | bytes | None = Field(default=None, description="Plain-text body")
    comment: str | None = None
    block_id: int = Field(default=0, description="Internal block identity")
    create_date: datetime | None = None
    modify_date: datetime | None = None
    read: bool = Field(default=False, description="Read flag")
    message_store: bool = Field(default=False, description="True for the message-store root record")
    attachments: list[Attachment] = Field(default_factory=list)
    extra_fields: list[ExtraField] = Field(default_factory=list)

    folder: FolderFields | None = None
    contact: ContactFields | None = None
    email: EmailFields | None = None
    journal: JournalFields | None = None
    appointment: AppointmentFields | None = None

    model_config = {"ser_json_bytes": "base64", "val_json_bytes": "base64"}

    @property
    def keywords(self) -> list[str]:
        """Values of every ``Keywords`` extra field, in store order."""
        return [ef.value for ef in self.extra_fields if ef.name == "Keywords"]


def classify(item: ArchiveItem) -> ItemKind:
    """Decide the single :class:`ItemKind` for *item*.

    A folder needs a name to be walked; the variant record must agree with
    the store-reported type for leaf items.
    """
    if item.folder is not None and item.display_name:
        return ItemKind.FOLDER
    if item.contact is not None and item.item_type is ItemType.CONTACT:
        return ItemKind.CONTACT
    if item.email is not None and item.item_type in EMAIL_TYPES:
        return ItemKind.EMAIL
    if item.journal is not None and item.item_type is ItemType.JOURNAL:
        return ItemKind.JOURNAL
    if item.appointment is not None and item.item_type is ItemType.APPOINTMENT:
        return ItemKind.APPOINTMENT
    if item.message_store:
        return ItemKind.MESSAGE_STORE
    return ItemKind.UNKNOWN


class StoreNode(BaseModel):
    """Descriptor-tree node of a JSON-serialized archive."""

    node_id: int = Field(description="Descriptor id, unique within the archive")
    has_description: bool = Field(
        default=True,
        description="False when the descriptor's description record is missing",
    )
    item: ArchiveItem | None = Field(
        default=None,
        description="Decoded item; None when the store could not materialize it",
    )
    children: list[StoreNode] = Field(default_factory=list)


class ArchiveDocument(BaseModel):
    """Top-level JSON document produced by an archive decoder."""

    model_config = {"ser_json_bytes": "base64", "val_json_bytes": "base64"}

    root: StoreNode = Field(description="Message-store root record")
    top_of_folders: int | None = Field(
        default=None,
        description="node_id of the top-of-folders record (defaults to the root)",
    )
    blobs: dict[int, bytes] = Field(
        default_factory=dict,
        description="Externally stored attachment payloads keyed by blob id",
    )


Attachment.model_rebuild()
StoreNode.model_rebuild()
