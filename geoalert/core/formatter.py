"""Message formatting - Pure functions.

This module formats zone-tagged alerts into SMS and email messages.
All functions are pure with no side effects.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from html import escape

from geoalert.core.alert import Alert
from geoalert.core.geo import ZONE_IMMEDIATE, ZONE_NEARBY, ZONE_REGIONAL
from geoalert.core.variants import ZoneDistribution, localized_content

# IST is UTC+5:30
IST = timezone(timedelta(hours=5, minutes=30), name="IST")

SEVERITY_EMOJI = {
    "critical": "🚨",
    "warning": "⚠️",
    "info": "ℹ️",
}

TYPE_EMOJI = {
    "earthquake": "🌍",
    "flood": "🌊",
    "fire": "🔥",
    "storm": "⛈️",
    "other": "📢",
}

SEVERITY_COLORS = {
    "critical": "#dc2626",
    "warning": "#f59e0b",
    "info": "#3b82f6",
}

ZONE_COLORS = {
    ZONE_IMMEDIATE: "#dc2626",
    ZONE_NEARBY: "#f59e0b",
    ZONE_REGIONAL: "#3b82f6",
}

ZONE_BACKGROUNDS = {
    ZONE_IMMEDIATE: "#fef2f2",
    ZONE_NEARBY: "#fffbeb",
    ZONE_REGIONAL: "#eff6ff",
}

ZONE_SMS_PREFIX = {
    ZONE_IMMEDIATE: "🎯 IMMEDIATE AREA",
    ZONE_NEARBY: "📍 NEARBY AREA",
    ZONE_REGIONAL: "🗺️ REGIONAL ALERT",
}

ZONE_EMAIL_LABELS = {
    ZONE_IMMEDIATE: "🎯 IMMEDIATE AREA ALERT",
    ZONE_NEARBY: "📍 NEARBY AREA WARNING",
    ZONE_REGIONAL: "🗺️ REGIONAL INFORMATION",
}

ZONE_SUBJECT_PREFIX = {
    ZONE_IMMEDIATE: "🚨 IMMEDIATE",
    ZONE_NEARBY: "⚠️ NEARBY",
    ZONE_REGIONAL: "📢 REGIONAL",
}

ZONE_CALL_TO_ACTION = {
    ZONE_IMMEDIATE: "🚨 TAKE IMMEDIATE ACTION",
    ZONE_NEARBY: "⚠️ MONITOR SITUATION",
    ZONE_REGIONAL: "📢 STAY INFORMED",
}

ZONE_EMAIL_ACTIONS = {
    ZONE_IMMEDIATE: (
        "🚨 IMMEDIATE ACTION REQUIRED",
        "You are in the immediate impact area. Follow emergency procedures "
        "and local authority guidance immediately.",
    ),
    ZONE_NEARBY: (
        "⚠️ MONITOR SITUATION CLOSELY",
        "Emergency situation detected near your location. Stay alert and be "
        "prepared to take action if conditions change.",
    ),
    ZONE_REGIONAL: (
        "📢 STAY INFORMED",
        "Emergency situation in your region. Stay informed through official "
        "channels and follow local authority guidance.",
    ),
}

EMERGENCY_CONTACTS = (
    ("National Emergency", "112"),
    ("Police", "100"),
    ("Fire Brigade", "101"),
    ("Ambulance", "108"),
)


@dataclass(frozen=True)
class EmailContent:
    """Rendered email subject and HTML body."""
    subject: str
    html: str


def format_timestamp(timestamp: datetime) -> str:
    """Format an alert timestamp in Indian Standard Time.

    Pure function.
    """
    return timestamp.astimezone(IST).strftime("%Y-%m-%d %H:%M:%S IST")


def format_zone_label(alert: Alert) -> str:
    """Zone prefix with radius for SMS, or DIRECT ALERT when untagged."""
    if alert.zone is None:
        return "DIRECT ALERT"
    return f"{ZONE_SMS_PREFIX[alert.zone]} ({alert.radius_km}km)"


def format_sms_message(alert: Alert, language: str) -> str:
    """Format an alert as a plain-text SMS body.

    Pure function.

    Args:
        alert: Zone-tagged (or direct) alert
        language: Recipient language; falls back to English content

    Returns:
        SMS text
    """
    content = localized_content(alert, language)
    call_to_action = ZONE_CALL_TO_ACTION.get(alert.zone, ZONE_CALL_TO_ACTION[ZONE_REGIONAL])

    lines = [
        f"{SEVERITY_EMOJI[alert.severity]} EMERGENCY ALERT",
        format_zone_label(alert),
        "",
        f"{TYPE_EMOJI.get(alert.type, TYPE_EMOJI['other'])} {content.title}",
        "",
        f"📍 Location: {alert.location}",
        f"🕒 Time: {format_timestamp(alert.timestamp)}",
        f"📡 Source: {alert.source}",
        "",
        content.description,
        "",
        call_to_action,
        "",
        "Reply STOP to unsubscribe.",
    ]
    return "\n".join(lines)


def format_email_subject(alert: Alert, language: str) -> str:
    """Format an email subject prefixed by zone urgency.

    Pure function. Direct (untagged) alerts use an EMERGENCY prefix.
    """
    content = localized_content(alert, language)
    prefix = ZONE_SUBJECT_PREFIX.get(alert.zone, "🚨 EMERGENCY")
    return f"{prefix} ALERT: {content.title}"


def _detail_row(icon: str, label: str, value_html: str) -> str:
    return (
        '<tr>'
        f'<td style="padding: 6px 8px; font-size: 18px;">{icon}</td>'
        f'<td style="padding: 6px 8px;"><strong style="color: #1f2937;">{label}:</strong> '
        f'<span style="color: #4b5563;">{value_html}</span></td>'
        '</tr>'
    )


def _pill(text: str, color: str) -> str:
    return (
        f'<span style="padding: 4px 12px; background: {color}; color: white; '
        f'border-radius: 20px; font-size: 12px; font-weight: bold;">{escape(text)}</span>'
    )


def format_email_html(alert: Alert, language: str) -> str:
    """Format an alert as an HTML email document.

    Pure function. Zone alerts use zone colors; direct alerts use the
    severity color. All alert text is HTML-escaped.

    Args:
        alert: Zone-tagged (or direct) alert
        language: Recipient language; falls back to English content

    Returns:
        HTML document
    """
    content = localized_content(alert, language)

    if alert.zone is not None:
        color = ZONE_COLORS[alert.zone]
        zone_label = ZONE_EMAIL_LABELS[alert.zone]
        action_title, action_text = ZONE_EMAIL_ACTIONS[alert.zone]
        action_background = ZONE_BACKGROUNDS[alert.zone]
    else:
        color = SEVERITY_COLORS[alert.severity]
        zone_label = "DIRECT EMERGENCY ALERT"
        action_title, action_text = ZONE_EMAIL_ACTIONS[ZONE_REGIONAL]
        action_background = ZONE_BACKGROUNDS[ZONE_REGIONAL]

    rows = [
        _detail_row("📍", "Location", escape(alert.location)),
        _detail_row("🕒", "Time", escape(format_timestamp(alert.timestamp))),
        _detail_row(
            "⚠️", "Severity",
            _pill(alert.severity.upper(), SEVERITY_COLORS[alert.severity]),
        ),
        _detail_row("📡", "Source", escape(alert.source)),
    ]
    if alert.zone is not None:
        rows.append(_detail_row(
            "🎯", "Alert Zone",
            _pill(f"{alert.zone.upper()} ({alert.radius_km}km radius)", color),
        ))

    contacts = "\n".join(
        f'<div><strong>{name}:</strong> '
        f'<a href="tel:{number}" style="color: #dc2626; text-decoration: none;">{number}</a></div>'
        for name, number in EMERGENCY_CONTACTS
    )

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Emergency Alert</title>
  </head>
  <body style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 0; background: #f8fafc;">
    <div style="max-width: 600px; margin: 0 auto; background: white;">
      <div style="background: {color}; color: white; padding: 30px 20px; text-align: center;">
        <h1 style="margin: 0; font-size: 28px;">🚨 EMERGENCY ALERT</h1>
        <div style="margin: 10px 0; padding: 8px 16px; background: rgba(255,255,255,0.2); border-radius: 20px; display: inline-block; font-size: 14px; font-weight: bold;">{zone_label}</div>
        <p style="margin: 10px 0 0 0; font-size: 20px; font-weight: bold;">{escape(content.title)}</p>
      </div>
      <div style="padding: 30px 20px;">
        <table style="width: 100%; background: #f8fafc; border-left: 5px solid {color}; border-radius: 12px; margin-bottom: 25px;">
          {"".join(rows)}
        </table>
        <h3 style="color: #1f2937;">📋 Alert Details:</h3>
        <div style="padding: 20px; border-radius: 8px; border: 1px solid #e5e7eb; margin-bottom: 25px;">{escape(content.description)}</div>
        <div style="background: {action_background}; border: 2px solid {color}; padding: 20px; border-radius: 12px; margin-bottom: 25px;">
          <h4 style="margin: 0 0 10px 0; color: {color};">{action_title}</h4>
          <p style="margin: 0; color: #374151;">{action_text}</p>
        </div>
        <div style="background: #f9fafb; padding: 20px; border-radius: 8px;">
          <h4 style="margin: 0 0 15px 0; color: #1f2937;">🆘 Emergency Contacts:</h4>
{contacts}
        </div>
      </div>
      <div style="background: #f3f4f6; padding: 20px; text-align: center; font-size: 12px; color: #9ca3af;">
        This is an automated emergency notification.<br>
        Language: {escape(language.upper())} | Alert ID: {escape(alert.id)}
      </div>
    </div>
  </body>
</html>
"""


def format_email_message(alert: Alert, language: str) -> EmailContent:
    """Render subject and HTML body together."""
    return EmailContent(
        subject=format_email_subject(alert, language),
        html=format_email_html(alert, language),
    )


def format_zone_plan(distributions: list[ZoneDistribution]) -> str:
    """Format a human-readable summary of a zoned distribution.

    Pure function.
    """
    if not distributions:
        return "No zones with matching recipients."

    lines = []
    for distribution in distributions:
        zone = distribution.zone
        lines.append(
            f"{ZONE_SMS_PREFIX[zone.kind]} ({zone.radius_km}km) - "
            f"severity {zone.severity}, {len(distribution.recipients)} recipient(s), "
            f"locations: {', '.join(sorted(zone.member_location_names))}"
        )
    return "\n".join(lines)
