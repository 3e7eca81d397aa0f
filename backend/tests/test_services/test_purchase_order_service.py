"""
Unit tests for PurchaseOrderService
"""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

from pydantic import ValidationError as PydanticValidationError

from invenhub.core.exceptions import (
    ConflictError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from invenhub.domain.catalog import PurchaseOrderStatus
from invenhub.domain.purchase_order import PurchaseOrder, PurchaseOrderCreate
from invenhub.services.purchase_order_service import PurchaseOrderService


ORDERED_AT = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _order(status='pending', **overrides):
    data = {
        'id': 5,
        'supplier_id': 1,
        'status': status,
        'total_amount': Decimal('129.90'),
        'order_date': ORDERED_AT,
    }
    data.update(overrides)
    return PurchaseOrder(**data)


@pytest.fixture
def po_repo():
    repo = MagicMock()
    repo.create.side_effect = lambda order, items: _order(
        status=order['status'], total_amount=order['total_amount']
    )
    return repo


@pytest.fixture
def supplier_repo():
    repo = MagicMock()
    repo.find_by_id.return_value = MagicMock(id=1)
    return repo


@pytest.fixture
def product_repo(make_product):
    repo = MagicMock()
    repo.find_by_ids.return_value = {1: make_product()}
    return repo


@pytest.fixture
def service(po_repo, supplier_repo, product_repo):
    return PurchaseOrderService(
        purchase_order_repository=po_repo,
        supplier_repository=supplier_repo,
        product_repository=product_repo,
    )


def _payload(**overrides):
    data = {
        'supplier_id': 1,
        'items': [{'product_id': 1, 'quantity': 10, 'unit_price': '12.99'}],
    }
    data.update(overrides)
    return PurchaseOrderCreate(**data)


class TestCreatePurchaseOrder:

    def test_total_is_computed_from_lines(self, service, po_repo):
        service.create_purchase_order(_payload())

        order = po_repo.create.call_args.kwargs['order']
        assert order['total_amount'] == Decimal('129.90')
        assert order['status'] == 'pending'
        assert order['delivered_date'] is None

    def test_expected_delivery_defaults_to_a_week_out(self, service, po_repo):
        service.create_purchase_order(_payload(order_date=ORDERED_AT))

        order = po_repo.create.call_args.kwargs['order']
        assert order['expected_delivery_date'] == ORDERED_AT + timedelta(days=7)

    def test_items_carry_product_name(self, service, po_repo):
        service.create_purchase_order(_payload())

        items = po_repo.create.call_args.kwargs['items']
        assert items[0]['product_name'] == 'Safari Adventure T-Shirt'

    def test_created_as_received_sets_delivered_date(self, service, po_repo):
        service.create_purchase_order(_payload(status='received'))

        order = po_repo.create.call_args.kwargs['order']
        assert order['status'] == 'received'
        assert order['delivered_date'] is not None

    def test_stored_lines_add_up_to_total(self, service, po_repo):
        service.create_purchase_order(_payload(items=[
            {'product_id': 1, 'quantity': 3, 'unit_price': '0.33'},
            {'product_id': 1, 'quantity': 2, 'unit_price': '12.99'},
        ]))

        kwargs = po_repo.create.call_args.kwargs
        lines_total = sum(item['unit_price'] * item['quantity'] for item in kwargs['items'])
        assert lines_total == kwargs['order']['total_amount'] == Decimal('26.97')

    def test_sub_cent_unit_price_is_rejected_on_input(self):
        with pytest.raises(PydanticValidationError):
            _payload(items=[{'product_id': 1, 'quantity': 3, 'unit_price': '0.333'}])

    def test_total_mismatch_is_rejected(self, service, po_repo):
        with pytest.raises(ValidationError, match="Total amount mismatch"):
            service.create_purchase_order(_payload(total_amount='100.00'))

        po_repo.create.assert_not_called()

    def test_unknown_supplier_is_rejected(self, service, supplier_repo):
        supplier_repo.find_by_id.return_value = None

        with pytest.raises(ValidationError, match="Supplier 1 not found"):
            service.create_purchase_order(_payload())

    def test_unknown_product_is_rejected(self, service):
        with pytest.raises(ValidationError, match="Products not found"):
            service.create_purchase_order(_payload(items=[
                {'product_id': 1, 'quantity': 1, 'unit_price': '1.00'},
                {'product_id': 77, 'quantity': 1, 'unit_price': '1.00'},
            ]))

    def test_empty_order_is_rejected(self, service):
        with pytest.raises(ValidationError):
            service.create_purchase_order(_payload(items=[]))


class TestUpdateStatus:

    @pytest.mark.parametrize("current,requested", [
        ('pending', 'ordered'),
        ('pending', 'received'),
        ('pending', 'canceled'),
        ('ordered', 'received'),
        ('ordered', 'canceled'),
    ])
    def test_allowed_transitions(self, service, po_repo, current, requested):
        po_repo.find_by_id.return_value = _order(status=current)
        po_repo.update_status.return_value = _order(status=requested)

        updated = service.update_status(5, PurchaseOrderStatus(requested))

        assert updated.status.value == requested
        kwargs = po_repo.update_status.call_args.kwargs
        assert kwargs['expected_status'] == current
        assert kwargs['new_status'] == requested
        assert (kwargs['delivered_date'] is not None) == (requested == 'received')

    @pytest.mark.parametrize("current,requested", [
        ('received', 'canceled'),
        ('received', 'pending'),
        ('canceled', 'ordered'),
        ('ordered', 'pending'),
    ])
    def test_rejected_transitions(self, service, po_repo, current, requested):
        po_repo.find_by_id.return_value = _order(status=current)

        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            service.update_status(5, PurchaseOrderStatus(requested))

        assert isinstance(exc_info.value, ConflictError)
        assert str(exc_info.value) == (
            f"Cannot change purchase order status from {current} to {requested}"
        )
        po_repo.update_status.assert_not_called()

    def test_concurrent_change_is_a_conflict(self, service, po_repo):
        po_repo.find_by_id.side_effect = [_order(status='ordered'), _order(status='received')]
        po_repo.update_status.return_value = None

        with pytest.raises(InvalidStatusTransitionError, match="from received to canceled"):
            service.update_status(5, PurchaseOrderStatus.CANCELED)

    def test_order_removed_mid_update(self, service, po_repo):
        po_repo.find_by_id.side_effect = [_order(status='ordered'), None]
        po_repo.update_status.return_value = None

        with pytest.raises(NotFoundError):
            service.update_status(5, PurchaseOrderStatus.RECEIVED)

    def test_unknown_order(self, service, po_repo):
        po_repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            service.update_status(5, PurchaseOrderStatus.ORDERED)


def test_delete_unknown_order(service, po_repo):
    po_repo.delete.return_value = False

    with pytest.raises(NotFoundError):
        service.delete_purchase_order(5)
