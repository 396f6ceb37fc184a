# grocery/services/notification_service.py
from kombu.exceptions import OperationalError as BrokerError

from grocery.celery_worker import celery_app
from grocery.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Queues customer notifications on Celery.

    Called after the business transaction committed, so a broker outage is
    logged and never turned into a failed request.
    """

    @staticmethod
    def send_order_placed(user_id, order_id, total_amount) -> bool:
        try:
            send_order_placed_task.delay(str(user_id), str(order_id), str(total_amount))
        except BrokerError as e:
            logger.warning(f"Could not queue order notification for order {order_id}: {e}")
            return False
        return True

    @staticmethod
    def send_password_reset(email: str, token: str) -> bool:
        try:
            send_password_reset_task.delay(email, token)
        except BrokerError as e:
            logger.warning(f"Could not queue password reset mail: {e}")
            return False
        return True


@celery_app.task(name="grocery.services.notification_service.send_order_placed_task")
def send_order_placed_task(user_id: str, order_id: str, total_amount: str):
    """
    Delivery is a log line for now; a mail or push gateway plugs in here.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} placed, total {total_amount}")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="grocery.services.notification_service.send_password_reset_task")
def send_password_reset_task(email: str, token: str):
    logger.info(f"[NOTIFICATION] Password reset link issued for {email}")
    return {"email": email, "status": "sent"}
