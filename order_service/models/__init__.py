from order_service.models.order_item import OrderItem
from order_service.models.order import Order
from order_service.models.scheduler_lock import SchedulerLock

# add ALL models here
