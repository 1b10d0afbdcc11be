"""Line item pricing

Turns line item inputs into OrderItem rows and totals. Every subtotal is
quantity x unit_cost rounded to cents; the order total is the sum of item
totals and the material length is the sum of printed quantities.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from libs.result import Result, Return
from src.app.errors import validation_error
from src.domain.amounts import ZERO, is_non_negative_finite, quantize
from src.domain.order_item import OrderItem
from .dtos import LineItemComponentDTO, LineItemDTO


@dataclass
class PricedItems:
    items: List[OrderItem]
    total: Decimal
    print_length: Decimal


def _component(component: Optional[LineItemComponentDTO], item_number: int, name: str):
    if component is None:
        return ZERO, ZERO, ZERO
    for field in ("quantity", "unit_cost"):
        value = getattr(component, field)
        if not is_non_negative_finite(value):
            raise ValueError(f"Item {item_number}: {name} {field} must be a non-negative number, got {value}")
    quantity = quantize(component.quantity)
    unit_cost = quantize(component.unit_cost)
    return quantity, unit_cost, quantize(quantity * unit_cost)


def price_line_items(line_items: List[LineItemDTO]) -> Result[PricedItems]:
    if not line_items:
        return Return.err(validation_error("An order needs at least one line item", field="items"))

    items = []
    try:
        for number, line in enumerate(line_items, start=1):
            if line.printing is None and line.pressing is None and line.badge is None:
                raise ValueError(f"Item {number} has no printing, pressing or badge component")
            print_qty, print_cost, print_subtotal = _component(line.printing, number, "printing")
            press_qty, press_cost, press_subtotal = _component(line.pressing, number, "pressing")
            badge_qty, badge_cost, badge_subtotal = _component(line.badge, number, "badge")
            items.append(
                OrderItem(
                    item_number=number,
                    print_quantity=print_qty,
                    print_unit_cost=print_cost,
                    print_subtotal=print_subtotal,
                    pressing_quantity=press_qty,
                    pressing_unit_cost=press_cost,
                    pressing_subtotal=press_subtotal,
                    badge_quantity=badge_qty,
                    badge_unit_cost=badge_cost,
                    badge_subtotal=badge_subtotal,
                    total=print_subtotal + press_subtotal + badge_subtotal,
                )
            )
    except ValueError as e:
        return Return.err(validation_error(str(e), field="items"))

    return Return.ok(
        PricedItems(
            items=items,
            total=sum((item.total for item in items), ZERO),
            print_length=sum((item.print_quantity for item in items), ZERO),
        )
    )
