"""RFC 2445 iCalendar serializers for journal entries, appointments and
meeting requests.
"""

from __future__ import annotations

from pst_schema import AppointmentFields, AppointmentLabel, ArchiveItem, FreeBusy, RecurrenceRule

from .rfc import rfc2426_escape, rfc2445_datetime, rfc2445_now, to_text
from .vcard import categories_line

PRODID = "-//pst-stream//Archive Export//EN"

FREQUENCIES = ("DAILY", "WEEKLY", "MONTHLY", "YEARLY")
WEEKDAYS = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")

LABEL_CATEGORIES = {
    AppointmentLabel.IMPORTANT: "IMPORTANT",
    AppointmentLabel.BUSINESS: "BUSINESS",
    AppointmentLabel.PERSONAL: "PERSONAL",
    AppointmentLabel.VACATION: "VACATION",
    AppointmentLabel.MUST_ATTEND: "MUST-ATTEND",
    AppointmentLabel.TRAVEL_REQUIRED: "TRAVEL-REQUIRED",
    AppointmentLabel.NEEDS_PREPARATION: "NEEDS-PREPARATION",
    AppointmentLabel.BIRTHDAY: "BIRTHDAY",
    AppointmentLabel.ANNIVERSARY: "ANNIVERSARY",
    AppointmentLabel.PHONE_CALL: "PHONE-CALL",
}

# Alarms outside [0, 1440) minutes are treated as bogus.
MAX_ALARM_MINUTES = 1440


def rrule_line(rule: RecurrenceRule) -> str:
    """``RRULE`` line for *rule*; zero-valued parts are omitted."""
    line = f"RRULE:FREQ={FREQUENCIES[rule.frequency]}"
    if rule.count:
        line += f";COUNT={rule.count}"
    if rule.interval and rule.interval != 1:
        line += f";INTERVAL={rule.interval}"
    if rule.day_of_month:
        line += f";BYMONTHDAY={rule.day_of_month}"
    if rule.month_of_year:
        line += f";BYMONTH={rule.month_of_year}"
    if rule.position:
        line += f";BYSETPOS={rule.position}"
    days = [day for bit, day in enumerate(WEEKDAYS) if rule.weekday_mask & (1 << bit)]
    if days:
        line += ";BYDAY=" + ",".join(days)
    return line


def _stamp_lines(item: ArchiveItem) -> list[str]:
    lines = [f"DTSTAMP:{rfc2445_now()}"]
    if item.create_date:
        lines.append(f"CREATED:{rfc2445_datetime(item.create_date)}")
    if item.modify_date:
        lines.append(f"LAST-MOD:{rfc2445_datetime(item.modify_date)}")
    if item.subject:
        lines.append(f"SUMMARY:{rfc2426_escape(item.subject)}")
    if item.body:
        charset = item.email.body_charset if item.email else None
        lines.append(f"DESCRIPTION:{rfc2426_escape(to_text(item.body, charset))}")
    return lines


def _status_lines(showas: FreeBusy | None) -> list[str]:
    if showas is FreeBusy.TENTATIVE:
        return ["STATUS:TENTATIVE"]
    if showas is FreeBusy.FREE:
        return ["TRANSP:TRANSPARENT", "STATUS:CONFIRMED"]
    if showas in (FreeBusy.BUSY, FreeBusy.OUT_OF_OFFICE):
        return ["STATUS:CONFIRMED"]
    return []


def journal_lines(item: ArchiveItem) -> list[str]:
    """The ``VJOURNAL`` component of a journal item."""
    lines = ["BEGIN:VJOURNAL", *_stamp_lines(item)]
    if item.journal and item.journal.start:
        lines.append(f"DTSTART;VALUE=DATE-TIME:{rfc2445_datetime(item.journal.start)}")
    lines.append("END:VJOURNAL")
    return lines


def event_lines(item: ArchiveItem) -> list[str]:
    """Properties of the ``VEVENT`` component, up to and including ``END:VEVENT``.

    ``BEGIN:VEVENT`` is left to the caller so that a meeting request can
    insert its ``ORGANIZER`` first.
    """
    appointment = item.appointment or AppointmentFields()
    lines = [f"UID:{item.block_id:#x}", *_stamp_lines(item)]
    if appointment.start:
        lines.append(f"DTSTART;VALUE=DATE-TIME:{rfc2445_datetime(appointment.start)}")
    if appointment.end:
        lines.append(f"DTEND;VALUE=DATE-TIME:{rfc2445_datetime(appointment.end)}")
    if appointment.location:
        lines.append(f"LOCATION:{rfc2426_escape(appointment.location)}")
    lines.extend(_status_lines(appointment.showas))
    if appointment.recurrence is not None:
        lines.append(rrule_line(appointment.recurrence))

    if appointment.label is AppointmentLabel.NONE:
        lines.append(categories_line(item) or "CATEGORIES:NONE")
    else:
        lines.append(f"CATEGORIES:{LABEL_CATEGORIES[appointment.label]}")

    if appointment.alarm and 0 <= appointment.alarm_minutes < MAX_ALARM_MINUTES:
        lines.extend([
            "BEGIN:VALARM",
            f"TRIGGER:-PT{appointment.alarm_minutes}M",
            "ACTION:DISPLAY",
            "DESCRIPTION:Reminder",
            "END:VALARM",
        ])
    lines.append("END:VEVENT")
    return lines


def _calendar(body: list[str], method: str | None = None) -> str:
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", f"PRODID:{PRODID}"]
    if method:
        lines.append(f"METHOD:{method}")
    lines.extend(body)
    lines.append("END:VCALENDAR")
    return "\n".join(lines) + "\n"


def write_journal(item: ArchiveItem) -> str:
    return _calendar(journal_lines(item))


def write_appointment(item: ArchiveItem) -> str:
    return _calendar(["BEGIN:VEVENT", *event_lines(item)])


def write_schedule_request(
    item: ArchiveItem,
    sender: str | None,
    sender_name: str | None,
    method: str = "REQUEST",
) -> str:
    """Meeting request carried inside a scheduling message."""
    body = ["BEGIN:VEVENT"]
    if sender:
        body.append(f'ORGANIZER;CN="{sender_name or ""}":MAILTO:{sender}')
    body.extend(event_lines(item))
    return _calendar(body, method)
