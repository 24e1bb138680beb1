# phonedeals/tasks/order_email.py
from phonedeals.celery_worker import celery_app
from phonedeals.data.database import SessionLocal
from phonedeals.repos.order_repo import OrderRepo
from phonedeals.services.mail_client import MailClient
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


def render_confirmation(order) -> str:
    lines = [f"Hi {order.user.firstname},", "", f"Thank you for your order #{order.id}.", ""]
    for item in order.items:
        title = item.phone.title if item.phone is not None else "Removed listing"
        lines.append(f"- {title} x{item.quantity} @ {item.price}")
    lines += ["", f"Total: {order.total_amount}"]
    return "\n".join(lines)


@celery_app.task(name="phonedeals.tasks.order_email.send_order_confirmation_task")
def send_order_confirmation_task(order_id: int):
    logger.info(f"Order confirmation task started for order {order_id}")

    db = SessionLocal()
    try:
        order = OrderRepo(db).get_populated_order(order_id)
        if not order or not order.user:
            logger.warning(f"Order {order_id} not found, confirmation skipped")
            return {"order_id": order_id, "status": "skipped"}

        MailClient().send(
            to=order.user.email,
            subject=f"Your OldPhoneDeals order #{order.id}",
            body=render_confirmation(order),
        )
        logger.info(f"Confirmation for order {order_id} sent to {order.user.email}")
        return {"order_id": order_id, "status": "sent"}
    finally:
        db.close()
