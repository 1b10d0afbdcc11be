"""Order ledger use cases"""
from .create_order import CreateOrder
from .update_order import UpdateOrder
from .get_order import GetOrder, GetOrderByReceipt, ListOrders
from .change_status import CancelOrder, CompleteOrder
from .line_items import PricedItems, price_line_items
from .dtos import (
    LineItemComponentDTO,
    LineItemDTO,
    CreateOrderCommandDTO,
    UpdateOrderCommandDTO,
    OrderItemDTO,
    OrderDTO,
    ListOrdersResponseDTO,
)

__all__ = [
    "CreateOrder",
    "UpdateOrder",
    "GetOrder",
    "GetOrderByReceipt",
    "ListOrders",
    "CancelOrder",
    "CompleteOrder",
    "PricedItems",
    "price_line_items",
    "LineItemComponentDTO",
    "LineItemDTO",
    "CreateOrderCommandDTO",
    "UpdateOrderCommandDTO",
    "OrderItemDTO",
    "OrderDTO",
    "ListOrdersResponseDTO",
]
