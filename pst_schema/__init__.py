from .archive_item import (
    EMAIL_TYPES,
    AppointmentFields,
    AppointmentLabel,
    ArchiveDocument,
    ArchiveItem,
    Attachment,
    AttachMethod,
    ContactFields,
    EmailFields,
    ExtraField,
    FolderFields,
    FreeBusy,
    Frequency,
    ItemKind,
    ItemType,
    JournalFields,
    RecurrenceRule,
    StoreNode,
    classify,
)

__all__ = [
    "EMAIL_TYPES",
    "AppointmentFields",
    "AppointmentLabel",
    "ArchiveDocument",
    "ArchiveItem",
    "AttachMethod",
    "Attachment",
    "ContactFields",
    "EmailFields",
    "ExtraField",
    "FolderFields",
    "FreeBusy",
    "Frequency",
    "ItemKind",
    "ItemType",
    "JournalFields",
    "RecurrenceRule",
    "StoreNode",
    "classify",
]
