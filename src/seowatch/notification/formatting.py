"""Message formatting for alert notifications."""

import html
import json
from typing import Any

from .types import AlertLike

SEVERITY_COLORS = {
    "low": "#36a64f",
    "medium": "#ff9500",
    "high": "#ff0000",
    "critical": "#8b0000",
}


def _value(field: Any) -> str:
    return str(getattr(field, "value", field))


class AlertMessageFormatter:
    """Formats alerts for Slack and email delivery."""

    @staticmethod
    def format_slack_payload(alert: AlertLike) -> dict[str, Any]:
        """Incoming-webhook payload with one attachment coloured by severity."""
        severity = _value(alert.severity)

        return {
            "text": "SEO Monitoring Alert",
            "attachments": [
                {
                    "color": SEVERITY_COLORS.get(severity, SEVERITY_COLORS["medium"]),
                    "fields": [
                        {
                            "title": "Alert Type",
                            "value": _value(alert.type),
                            "short": True,
                        },
                        {
                            "title": "Severity",
                            "value": severity.upper(),
                            "short": True,
                        },
                        {"title": "Message", "value": alert.message, "short": False},
                        {
                            "title": "Timestamp",
                            "value": alert.timestamp.isoformat(),
                            "short": True,
                        },
                    ],
                }
            ],
        }

    @staticmethod
    def format_email_subject(alert: AlertLike) -> str:
        return f"[SEO Monitoring] {_value(alert.severity).upper()} {_value(alert.type)}"

    @staticmethod
    def format_email_text(alert: AlertLike) -> str:
        lines = [
            "SEO Monitoring Alert",
            "",
            f"Alert ID: {alert.id}",
            f"Type: {_value(alert.type)}",
            f"Severity: {_value(alert.severity).upper()}",
            f"Time: {alert.timestamp.isoformat()}",
            "",
            alert.message,
        ]
        if alert.details:
            lines.extend(["", "Details:", json.dumps(alert.details, indent=2, default=str)])
        return "\n".join(lines)

    @staticmethod
    def format_email_html(alert: AlertLike) -> str:
        severity = _value(alert.severity)
        color = SEVERITY_COLORS.get(severity, SEVERITY_COLORS["medium"])

        rows = [
            ("Alert ID", alert.id),
            ("Type", _value(alert.type)),
            ("Severity", severity.upper()),
            ("Time", alert.timestamp.isoformat()),
        ]
        table = "".join(
            f"<tr><th align='left'>{html.escape(k)}</th>"
            f"<td>{html.escape(str(v))}</td></tr>"
            for k, v in rows
        )

        details = ""
        if alert.details:
            details = (
                "<h3>Details</h3><pre>"
                + html.escape(json.dumps(alert.details, indent=2, default=str))
                + "</pre>"
            )

        return (
            "<html><body>"
            f"<h2 style='color:{color}'>SEO Monitoring Alert</h2>"
            f"<p>{html.escape(alert.message)}</p>"
            f"<table>{table}</table>"
            f"{details}"
            "</body></html>"
        )
