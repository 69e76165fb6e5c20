# settlement/services/mail_templates.py
from decimal import Decimal, ROUND_FLOOR
from html import escape

from settlement.domain.sanitize import LineSnapshot

PRIMARY_COLOR = "#6200EA"
SHIPPED_COLOR = "#00C853"
CANCELLED_COLOR = "#D32F2F"
PLACEHOLDER_IMAGE = "https://via.placeholder.com/50"


def _money(amount: Decimal) -> str:
    return f"€{amount:.2f}"


def _layout(color: str, title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<body style="margin:0;padding:0;background-color:#f4f4f4;font-family:Arial,sans-serif;">
  <div style="max-width:600px;margin:20px auto;background:#ffffff;border-radius:8px;overflow:hidden;">
    <div style="background-color:{color};padding:20px;text-align:center;">
      <h1 style="color:#ffffff;margin:0;">{escape(title)}</h1>
    </div>
    <div style="padding:20px;">{body}</div>
  </div>
</body>
</html>"""


def loyalty_points(subtotal: Decimal) -> int:
    return int(subtotal.to_integral_value(rounding=ROUND_FLOOR))


def render_order_confirmation(
    order_id: str,
    customer_name: str,
    lines: list[LineSnapshot],
    subtotal: Decimal,
    discount: Decimal,
    total: Decimal,
) -> tuple[str, str]:
    rows = "".join(
        f"""
      <tr>
        <td><img src="{escape(line.image_url or PLACEHOLDER_IMAGE)}" alt="" width="50" height="50"></td>
        <td><strong>{escape(line.product_name)}</strong></td>
        <td style="text-align:center;">x{line.quantity}</td>
        <td style="text-align:right;">{_money(line.unit_price)}</td>
      </tr>"""
        for line in lines
    )
    body = f"""
      <p>Hi <strong>{escape(customer_name)}</strong>, thank you for your order <strong>#{escape(order_id)}</strong>.</p>
      <table width="100%" cellspacing="0" cellpadding="6">
        <thead><tr><th></th><th align="left">NAME</th><th>QTY</th><th align="right">PRICE</th></tr></thead>
        <tbody>{rows}</tbody>
      </table>
      <table width="100%" cellspacing="0" cellpadding="4">
        <tr><td align="right">Subtotal:</td><td align="right">{_money(subtotal)}</td></tr>
        <tr><td align="right">Discount:</td><td align="right">-{_money(discount)}</td></tr>
        <tr><td align="right"><strong>Total:</strong></td><td align="right"><strong>{_money(total)}</strong></td></tr>
      </table>
      <p>You earned {loyalty_points(subtotal)} points!</p>"""
    subject = f"Order Confirmation #{order_id}"
    return subject, _layout(PRIMARY_COLOR, "Order Confirmed!", body)


def render_order_shipped(order_id: str, customer_name: str, items: list[dict]) -> tuple[str, str]:
    summary = "".join(
        f"<li>{escape(str(item.get('quantity', '')))}x <strong>{escape(str(item.get('productName', '')))}</strong></li>"
        for item in items
    )
    body = f"""
      <p>Hi <strong>{escape(customer_name)}</strong>,</p>
      <p>Your order <strong>#{escape(order_id)}</strong> has been shipped and is on its way.</p>
      <ul>{summary}</ul>"""
    return f"Your Order #{order_id} has been Shipped!", _layout(SHIPPED_COLOR, "Order Shipped!", body)


def render_order_cancelled(order_id: str, customer_name: str) -> tuple[str, str]:
    body = f"""
      <p>Hi <strong>{escape(customer_name)}</strong>,</p>
      <p>Your order <strong>#{escape(order_id)}</strong> has been cancelled.</p>
      <p>If you have already been charged, a refund will be processed shortly.</p>"""
    return f"Order #{order_id} Cancelled", _layout(CANCELLED_COLOR, "Order Cancelled", body)
