from decimal import Decimal

from services.order_service.models import OrderStatus
from services.order_service.schemas import OrderStatusUpdate
from shared.common import PaginationParams


async def place(order_service, order_request, user_id, *lines):
    result = await order_service.create_order(user_id, order_request(*lines))
    assert result.succeeded
    return result.data


async def test_get_orders_paginates_newest_first(order_service, make_product, order_request):
    product = await make_product(stock=50)
    placed = [await place(order_service, order_request, "user-1", (product.id, 1)) for _ in range(5)]

    first = (await order_service.get_orders(PaginationParams(page_number=1, page_size=2))).data
    last = (await order_service.get_orders(PaginationParams(page_number=3, page_size=2))).data

    assert first.total_count == 5
    assert first.total_pages == 3
    assert [o.id for o in first.items] == [placed[4].id, placed[3].id]
    assert not first.has_previous_page and first.has_next_page
    assert [o.id for o in last.items] == [placed[0].id]
    assert last.has_previous_page and not last.has_next_page


async def test_get_orders_sorts_by_total_amount(order_service, make_product, order_request):
    product = await make_product(price="4.00", stock=50)
    small = await place(order_service, order_request, "user-1", (product.id, 1))
    large = await place(order_service, order_request, "user-1", (product.id, 5))
    medium = await place(order_service, order_request, "user-1", (product.id, 2))

    ascending = (await order_service.get_orders(PaginationParams(sort_by="totalAmount"))).data
    descending = (await order_service.get_orders(PaginationParams(sort_by="TotalAmount", sort_descending=True))).data

    assert [o.id for o in ascending.items] == [small.id, medium.id, large.id]
    assert [o.total_amount for o in descending.items] == [Decimal("20.00"), Decimal("8.00"), Decimal("4.00")]


async def test_get_orders_sorts_by_status_ordinal(order_service, make_product, order_request):
    product = await make_product(stock=50)
    shipped = await place(order_service, order_request, "user-1", (product.id, 1))
    pending = await place(order_service, order_request, "user-1", (product.id, 1))
    confirmed = await place(order_service, order_request, "user-1", (product.id, 1))
    await order_service.update_status(shipped.id, OrderStatusUpdate(status=OrderStatus.SHIPPED))
    await order_service.update_status(confirmed.id, OrderStatusUpdate(status=OrderStatus.CONFIRMED))

    page = (await order_service.get_orders(PaginationParams(sort_by="status"))).data

    assert [o.id for o in page.items] == [pending.id, confirmed.id, shipped.id]


async def test_get_orders_searches_order_number(order_service, make_product, order_request):
    product = await make_product(stock=50)
    wanted = await place(order_service, order_request, "user-1", (product.id, 1))
    await place(order_service, order_request, "user-1", (product.id, 1))

    suffix = wanted.order_number.rsplit("-", 1)[1]
    page = (await order_service.get_orders(PaginationParams(search_term=suffix))).data

    assert page.total_count == 1
    assert page.items[0].id == wanted.id


async def test_get_user_orders_only_returns_owner_orders(order_service, make_product, order_request):
    product = await make_product(stock=50)
    mine_old = await place(order_service, order_request, "alice", (product.id, 1))
    await place(order_service, order_request, "bob", (product.id, 1))
    mine_new = await place(order_service, order_request, "alice", (product.id, 2))

    orders = (await order_service.get_user_orders("alice")).data

    assert [o.id for o in orders] == [mine_new.id, mine_old.id]
    assert (await order_service.get_user_orders("carol")).data == []


async def test_get_orders_by_status(order_service, make_product, order_request):
    product = await make_product(stock=50)
    first = await place(order_service, order_request, "user-1", (product.id, 1))
    second = await place(order_service, order_request, "user-1", (product.id, 1))
    await order_service.cancel_order(first.id)

    cancelled = (await order_service.get_orders_by_status(OrderStatus.CANCELLED)).data
    pending = (await order_service.get_orders_by_status(OrderStatus.PENDING)).data

    assert [o.id for o in cancelled] == [first.id]
    assert [o.id for o in pending] == [second.id]
