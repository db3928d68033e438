"""Magic link email content.

The text and HTML bodies embed the sign-in URL verbatim, so whatever the
recipient copies from either variant is the same link.
"""

SUBJECT = "Sign in to DishDash"

BRAND_COLOR = "#f97316"
BUTTON_TEXT_COLOR = "#ffffff"


def render_subject() -> str:
    return SUBJECT


def render_text(url: str, expires_in_hours: int = 24) -> str:
    return (
        f"Sign in to DishDash\n\n"
        f"Click the link below to sign in:\n{url}\n\n"
        f"If you didn't request this email, you can safely ignore it.\n\n"
        f"This link expires in {expires_in_hours} hours."
    )


def render_html(url: str, expires_in_hours: int = 24) -> str:
    return f"""
    <body style="background: #f9fafb; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;">
      <table width="100%" border="0" cellspacing="0" cellpadding="0">
        <tr>
          <td align="center" style="padding: 40px 0;">
            <table border="0" cellspacing="0" cellpadding="0" style="max-width: 600px; background: white; border-radius: 8px;">
              <tr>
                <td style="padding: 40px 40px 32px;">
                  <h1 style="margin: 0 0 24px; font-size: 24px; font-weight: 600; color: #111827;">
                    Sign in to DishDash
                  </h1>
                  <p style="margin: 0 0 24px; font-size: 16px; line-height: 24px; color: #4b5563;">
                    Click the button below to sign in to your account:
                  </p>
                  <a href="{url}" target="_blank" style="display: inline-block; padding: 12px 32px; background-color: {BRAND_COLOR}; color: {BUTTON_TEXT_COLOR}; text-decoration: none; border-radius: 6px; font-weight: 600;">
                    Sign in to DishDash
                  </a>
                  <p style="margin: 24px 0 0; font-size: 14px; color: #6b7280;">
                    Or copy and paste this URL into your browser:
                  </p>
                  <p style="margin: 8px 0 0; font-size: 14px; word-break: break-all; color: #3b82f6;">
                    {url}
                  </p>
                </td>
              </tr>
              <tr>
                <td style="padding: 24px 40px; border-top: 1px solid #e5e7eb;">
                  <p style="margin: 0; font-size: 12px; line-height: 18px; color: #9ca3af;">
                    If you didn't request this email, you can safely ignore it.
                    <br/>
                    This link expires in {expires_in_hours} hours.
                  </p>
                </td>
              </tr>
            </table>
          </td>
        </tr>
      </table>
    </body>
    """
