"""HTML template for the daily digest email."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from jinja2 import Environment, select_autoescape

from services.news.types import Article

_DIGEST_TEMPLATE = """\
<!DOCTYPE html>
<html>
  <body style="margin:0;padding:0;background:#f3f4f6;font-family:Arial,Helvetica,sans-serif;">
    <table role="presentation" width="100%" cellpadding="0" cellspacing="0">
      <tr><td align="center" style="padding:24px;">
        <table role="presentation" width="600" cellpadding="0" cellspacing="0"
               style="background:#ffffff;border-radius:12px;">
          <tr><td style="padding:24px;border-bottom:1px solid #e5e7eb;">
            <h1 style="margin:0;font-size:22px;color:#111827;">Your Daily News Digest</h1>
            <p style="margin:8px 0 0;color:#6b7280;">Hi {{ username }}, here is what happened on {{ today }}.</p>
          </td></tr>
          {% if articles %}
          {% for article in articles %}
          <tr><td style="padding:20px 24px;border-bottom:1px solid #f3f4f6;">
            {% if article.image_url %}
            <img src="{{ article.image_url }}" alt="" width="552"
                 style="display:block;border-radius:8px;margin-bottom:12px;max-width:100%;">
            {% endif %}
            <a href="{{ article.url }}" style="font-size:17px;font-weight:bold;color:#1d4ed8;text-decoration:none;">
              {{ article.title }}
            </a>
            <p style="margin:6px 0;color:#9ca3af;font-size:12px;">
              {{ article.source }}{% if article.published_at %} &middot; {{ article.published_at.strftime("%b %d, %Y %H:%M") }}{% endif %}
            </p>
            {% if article.description %}
            <p style="margin:0;color:#374151;font-size:14px;line-height:1.5;">{{ article.description }}</p>
            {% endif %}
          </td></tr>
          {% endfor %}
          {% else %}
          <tr><td style="padding:24px;color:#6b7280;">No new articles matched your preferences today.</td></tr>
          {% endif %}
          <tr><td style="padding:16px 24px;color:#9ca3af;font-size:12px;">
            You receive this email because daily digests are enabled in your NewsPulse profile.
          </td></tr>
        </table>
      </td></tr>
    </table>
  </body>
</html>
"""

_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))
_template = _env.from_string(_DIGEST_TEMPLATE)


def render_daily_digest(
    articles: Sequence[Article], username: str, *, today: Optional[datetime] = None
) -> str:
    today = today or datetime.now(timezone.utc)
    return _template.render(
        articles=list(articles),
        username=username,
        today=today.strftime("%A, %B %d, %Y"),
    )


__all__ = ["render_daily_digest"]
