from __future__ import annotations

from datetime import datetime

from hanumant.core.config import settings

ACCENT = "#b45309"
BG = "#fdf8f0"
CARD = "#ffffff"
TEXT = "#1f2937"
MUTED = "#6b7280"


def _wrap_library_email(*, headline: str, body_html: str, cta_label: str, cta_url: str) -> str:
    return f"""<!doctype html>
<html>
  <head>
    <meta charset="UTF-8" />
    <title>{headline}</title>
  </head>
  <body style="margin:0; padding:32px 0; background:{BG}; color:{TEXT}; font-family:'Segoe UI',Arial,sans-serif;">
    <div style="max-width:560px; margin:0 auto; background:{CARD}; border-radius:14px; overflow:hidden;">
      <div style="background:{ACCENT}; color:#ffffff; padding:18px 24px;">
        <div style="font-size:12px; letter-spacing:0.14em; text-transform:uppercase;">{settings.LIBRARY_NAME}</div>
        <div style="font-size:20px; font-weight:700; margin-top:4px;">{headline}</div>
      </div>
      <div style="padding:24px; font-size:15px; line-height:1.6;">
        {body_html}
        <div style="text-align:center; margin:24px 0 8px;">
          <a href="{cta_url}" style="background:{ACCENT}; color:#ffffff; text-decoration:none; padding:12px 20px; border-radius:10px; display:inline-block; font-weight:600;">{cta_label}</a>
        </div>
      </div>
    </div>
  </body>
</html>"""


def render_password_reset_email(
    *,
    reset_url: str,
    member_name: str,
    expires_at: datetime,
    requested_by: str | None,
) -> tuple[str, str]:
    expires_text = expires_at.strftime("%d %b %Y %H:%M")
    body_html = f"""
      <p style="margin:0 0 12px 0;">Namaste {member_name},</p>
      <p style="margin:0 0 12px 0;">A password reset was requested for your library account. The link works once and expires on {expires_text}.</p>
      <p style="margin:0; color:{MUTED};">If you did not expect this, ignore the message; your password stays unchanged.</p>
    """
    html = _wrap_library_email(
        headline="Reset your password",
        body_html=body_html,
        cta_label="Set a new password",
        cta_url=reset_url,
    )
    text = (
        f"Reset your {settings.LIBRARY_NAME} password.\n\n"
        f"Reset link: {reset_url}\n"
        f"Expires: {expires_text}\n"
    )
    if requested_by:
        text += f"Requested by: {requested_by}\n"
    return html, text
