"""Order confirmation email — tells the customer their order was placed.

The message links to the order page and copies the store admins.
"""

from html import escape
from urllib.parse import quote

from storefront.notifications import get_email_channel
from storefront.settings import setting


def order_url(order_id: str) -> str:
    origin = str(setting("order_link_origin")).strip().rstrip("/")
    return f"{origin}/order?id={quote(str(order_id), safe='')}"


def send_order_confirmation(email: str, order_id: str, order_number: str = "", name: str = "") -> dict:
    """Send the "order placed" email. Returns the channel's result dict."""
    email = (email or "").strip()
    if not email:
        return {"message_id": None, "status": "failed", "error": "Missing email"}

    label = f"Order {order_number}" if order_number else "Your order"
    display_name = (name or "").strip() or "there"
    link = order_url(order_id)

    body = (
        f"Hi {display_name},\n\n"
        "Your order has been placed successfully.\n"
        f"{label}\n\n"
        f"You can view your order summary anytime using this link:\n{link}\n\n"
        "If you have any questions, reply to this email and our team will help you.\n"
    )
    html_body = (
        '<div style="font-family: Arial, sans-serif; color: #111;">'
        f"<p>Hi {escape(display_name)},</p>"
        "<p>Your order has been placed successfully.</p>"
        f"<p><strong>{escape(label)}</strong></p>"
        "<p>You can view your order summary anytime using this link:</p>"
        f'<p><a href="{escape(link)}">{escape(link)}</a></p>'
        "<p>If you have any questions, reply to this email and our team will help you.</p>"
        "</div>"
    )
    admin_cc = [address.strip() for address in setting("admin_cc_emails") if address.strip()]
    return get_email_channel().send(
        to=email,
        subject=f"{label} has been placed",
        body=body,
        html_body=html_body,
        cc=admin_cc,
    )
