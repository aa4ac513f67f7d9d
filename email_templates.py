from datetime import datetime
from html import escape
from string import Template

# Inline styles only: most mail clients drop <style> blocks.
_LAYOUT = Template("""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>$title</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #f5f5f5;">
  <table role="presentation" style="width: 100%; border-collapse: collapse; background-color: #f5f5f5;">
    <tr>
      <td align="center" style="padding: 40px 20px;">
        <table role="presentation" style="max-width: 600px; width: 100%; border-collapse: collapse; background-color: #ffffff; border-radius: 12px;">
          <tr>
            <td style="padding: 40px 40px 20px; text-align: center; background: $accent; border-radius: 12px 12px 0 0;">
              <h1 style="margin: 0; color: #ffffff; font-size: 28px; font-weight: 700;">$heading</h1>
            </td>
          </tr>
          <tr>
            <td style="padding: 40px;">
              <p style="margin: 0 0 20px; color: #374151; font-size: 16px; line-height: 1.6;">Hi $name,</p>
              <p style="margin: 0 0 30px; color: #374151; font-size: 16px; line-height: 1.6;">$intro</p>
              <div style="background: $accent; border-radius: 12px; padding: 30px; text-align: center; margin: 30px 0;">
                <p style="margin: 0 0 15px; color: #ffffff; font-size: 14px; font-weight: 600; text-transform: uppercase; letter-spacing: 1px;">$code_label</p>
                <p style="margin: 0; color: #ffffff; font-size: 42px; font-weight: 700; letter-spacing: 8px; font-family: 'Courier New', monospace;">$otp</p>
              </div>
              <p style="margin: 30px 0 0; color: #6b7280; font-size: 14px; line-height: 1.6;">
                This code will expire in $ttl minutes. $disclaimer
              </p>
            </td>
          </tr>
          <tr>
            <td style="padding: 30px 40px; text-align: center; background-color: #f9fafb; border-radius: 0 0 12px 12px; border-top: 1px solid #e5e7eb;">
              <p style="margin: 0; color: #6b7280; font-size: 14px;">&copy; $year $app_name. All rights reserved.</p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
""")


def _render(*, title, heading, intro, code_label, disclaimer, accent, otp, name, app_name, ttl_minutes):
    return _LAYOUT.substitute(
        title=escape(title),
        heading=escape(heading),
        intro=escape(intro),
        code_label=escape(code_label),
        disclaimer=escape(disclaimer),
        accent=accent,
        otp=escape(otp),
        name=escape(name or "there"),
        app_name=escape(app_name),
        ttl=ttl_minutes,
        year=datetime.utcnow().year,
    )


def signup_otp_template(otp: str, name: str | None, app_name: str, ttl_minutes: int = 10) -> str:
    return _render(
        title=f"Verify Your Email - {app_name}",
        heading=f"Welcome to {app_name}!",
        intro="Thank you for signing up! To complete your registration, please verify your email address using the OTP code below:",
        code_label="Your Verification Code",
        disclaimer="If you didn't request this code, please ignore this email.",
        accent="linear-gradient(135deg, #3b82f6 0%, #2563eb 100%)",
        otp=otp,
        name=name,
        app_name=app_name,
        ttl_minutes=ttl_minutes,
    )


def forgot_password_otp_template(otp: str, name: str | None, app_name: str, ttl_minutes: int = 10) -> str:
    return _render(
        title=f"Reset Your Password - {app_name}",
        heading="Password Reset Request",
        intro="We received a request to reset your password. Use the OTP code below to continue:",
        code_label="Your Reset Code",
        disclaimer="If you didn't request a password reset, you can safely ignore this email; your password will not change.",
        accent="linear-gradient(135deg, #f59e0b 0%, #d97706 100%)",
        otp=otp,
        name=name,
        app_name=app_name,
        ttl_minutes=ttl_minutes,
    )
