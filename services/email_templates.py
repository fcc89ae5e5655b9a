"""Branded email bodies. Each builder returns (subject, text, html)."""

from html import escape
from typing import Tuple

from modules.config import ConfigEnv

EmailContent = Tuple[str, str, str]

_FOOTER = """
              <strong>FOSTER TOYS, INC.</strong><br>
              1100 11TH STREET, SACRAMENTO CA. 95814<br><br>
              FOSTER TOYS, INC. IS A 501(c)3 TAX-EXEMPT<br>
              NONPROFIT ORGANIZATION<br>
              Tax ID 39-3621457<br><br>
              &copy;2025 Foster Toys, Inc. All rights reserved
"""


def _button(link: str, label: str) -> str:
    return f"""
              <table width="100%" border="0" cellspacing="0" cellpadding="0" style="margin: 30px 0;">
                <tr>
                  <td align="center">
                    <a href="{escape(link, quote=True)}"
                       style="display: inline-block; padding: 12px 24px; background-color: #000000; color: #ffffff; text-decoration: none; border-radius: 16px; font-weight: 500; font-size: 14px;">
                      {label}
                    </a>
                  </td>
                </tr>
              </table>
"""


def _copy_link(link: str) -> str:
    return f"""
              <p style="margin-top: 20px;">Or copy and paste this link into your browser:</p>
              <p style="word-break: break-all; color:#666; font-size:14px; background-color:#fff; padding:10px; border-radius:8px;">
                {escape(link)}
              </p>
"""


def _layout(title: str, content: str) -> str:
    logo_url = escape(ConfigEnv.get_logo_url(), quote=True)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title}</title>
</head>
<body style="margin:0; padding:0; background:#F4E8D5; font-family: Arial, sans-serif;">
  <table width="100%" border="0" cellspacing="0" cellpadding="0" bgcolor="#F4E8D5">
    <tr>
      <td align="center" style="padding: 40px 20px 20px 20px;">
        <table width="600" border="0" cellspacing="0" cellpadding="0" bgcolor="#F4E8D5" style="max-width:600px;">
          <tr>
            <td align="center" style="padding-bottom: 30px;">
              <img src="{logo_url}" alt="Foster Toys Logo" width="180" style="display:block; margin:0 auto;">
            </td>
          </tr>
          <tr>
            <td style="padding: 0 30px 20px 30px; color:#333; font-size:16px; line-height:24px;">
{content}
              <p style="margin-top: 30px;">Thank you,<br>
              The Foster Toys Team</p>
            </td>
          </tr>
          <tr>
            <td align="center" style="padding: 40px 30px 20px 30px; color:#555; font-size:12px; line-height:18px;">
{_FOOTER}
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


def agency_invitation(invitation_link: str) -> EmailContent:
    subject = "Agency Invitation - Foster Toys"
    text = (
        "Hello there,\n\n"
        "You have been invited to join Foster Toys as an agency partner. "
        "Please fill out your agency details using the link below:\n\n"
        f"{invitation_link}\n\n"
        "Thank you,\nThe Foster Toys Team"
    )
    content = f"""
              <p>Hello there,</p>
              <p>
                You have been invited to join Foster Toys as an agency partner.
                Please click the button below to complete your onboarding and set up your agency account:
              </p>
{_button(invitation_link, "Complete Onboarding")}
"""
    return subject, text, _layout("Agency Invitation", content)


def admin_invitation(register_link: str) -> EmailContent:
    subject = "Admin Invitation - Foster Toys"
    text = (
        "Hello there,\n\n"
        "You have been invited to join Foster Toys as an administrator. "
        "Please click the link below to register:\n\n"
        f"{register_link}\n\n"
        "Thank you,\nThe Foster Toys Team"
    )
    content = f"""
              <p>Hello there,</p>
              <p>
                You have been invited to join Foster Toys as an administrator.
                Please click the button below to complete your registration:
              </p>
{_button(register_link, "Register Now")}
{_copy_link(register_link)}
"""
    return subject, text, _layout("Admin Invitation", content)


def password_reset(reset_link: str) -> EmailContent:
    subject = "Password Reset Request - Foster Toys"
    text = (
        "Hello there,\n\n"
        "You requested to reset your password for your Foster Toys account. "
        "Click the link below to reset it:\n\n"
        f"{reset_link}\n\n"
        "This link will expire in 15 minutes.\n\n"
        "If you didn't request this password reset, please ignore this email.\n\n"
        "Thank you,\nThe Foster Toys Team"
    )
    content = f"""
              <p>Hello there,</p>
              <p>
                You requested to reset your password for your Foster Toys account.
                Click the button below to reset your password:
              </p>
{_button(reset_link, "Reset Password")}
{_copy_link(reset_link)}
              <p style="color:#999; font-size: 12px; margin-top: 20px;">
                <strong>Important:</strong> This link will expire in 15 minutes for security reasons.
              </p>
              <p style="color:#999; font-size: 12px;">
                If you didn't request this password reset, please ignore this email. Your password will remain unchanged.
              </p>
"""
    return subject, text, _layout("Password Reset Request", content)


def volunteer_welcome(name: str) -> EmailContent:
    subject = "Welcome to Foster Toys!"
    text = (
        f"Hello {name},\n\n"
        "Thank you for registering as a volunteer with Foster Toys. We're excited to have you "
        "on board and appreciate your willingness to help make a difference in children's lives!\n\n"
        "Thank you,\nThe Foster Toys Team"
    )
    content = f"""
              <p>Hello {escape(name)},</p>
              <p>
                Thank you for registering as a volunteer with Foster Toys! We're excited to have you on board
                and appreciate your willingness to help make a difference in children's lives.
              </p>
              <p>
                Volunteers can help in many ways, from wrapping presents for holidays to helping organize events.
                If your help is needed, you will be contacted directly by the agency partner or Foster Toys.
              </p>
"""
    return subject, text, _layout("Welcome to Foster Toys", content)
