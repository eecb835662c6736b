"""
iCalendar export for meeting proposals.
"""

from datetime import datetime, timezone as dt_timezone

from icalendar import Calendar, Event, vText

PRODID = '-//MeshIt//Team Scheduling//EN'


def proposal_to_ical(proposal, domain: str = 'meshit.app') -> bytes:
    """
    Build a single-event .ics document for a proposal.

    Confirmed proposals are exported as CONFIRMED, anything else as
    TENTATIVE.
    """
    posting_title = proposal.posting.title or 'Meeting'
    summary = f"{proposal.title} - {posting_title}" if proposal.title else posting_title

    cal = Calendar()
    cal.add('prodid', PRODID)
    cal.add('version', '2.0')
    cal.add('calscale', 'GREGORIAN')
    cal.add('method', 'PUBLISH')

    event = Event()
    event.add('uid', f"{proposal.pk}@{domain}")
    event.add('summary', summary)
    event.add('description', proposal.description or f"Team meeting for {posting_title}")
    event.add('dtstart', proposal.start_time)
    event.add('dtend', proposal.end_time)
    event.add('dtstamp', datetime.now(dt_timezone.utc))
    event['status'] = vText('CONFIRMED' if proposal.status == 'confirmed' else 'TENTATIVE')

    cal.add_component(event)
    return cal.to_ical()


def ical_filename(proposal) -> str:
    return f"meeting-{str(proposal.pk)[:8]}.ics"
