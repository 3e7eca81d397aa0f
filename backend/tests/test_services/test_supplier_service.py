"""
Unit tests for SupplierService
"""
import pytest
from unittest.mock import MagicMock

from invenhub.core.exceptions import ConflictError, NotFoundError
from invenhub.domain.supplier import SupplierCreate, SupplierUpdate
from invenhub.services.supplier_service import SupplierService


@pytest.fixture
def supplier_repo():
    return MagicMock()


@pytest.fixture
def po_repo():
    repo = MagicMock()
    repo.count_by_supplier.return_value = 0
    return repo


@pytest.fixture
def service(supplier_repo, po_repo):
    return SupplierService(supplier_repo, po_repo)


def test_create_normalises_contact_details(service, supplier_repo):
    service.create_supplier(SupplierCreate(
        name='  Jungle Threads Ltd ',
        contact_person='Ravi Kumar',
        email='Orders@JungleThreads.com',
        phone='+91 98765 43210',
        address='12 Market Road, Jagdalpur',
    ))

    data = supplier_repo.create.call_args[0][0]
    assert data['name'] == 'Jungle Threads Ltd'
    assert data['email'] == 'orders@junglethreads.com'


def test_update_only_sends_given_fields(service, supplier_repo):
    service.update_supplier(1, SupplierUpdate(phone='+91 90000 00000'))

    supplier_repo.update.assert_called_once_with(1, {'phone': '+91 90000 00000'})


def test_update_missing_supplier(service, supplier_repo):
    supplier_repo.update.return_value = None

    with pytest.raises(NotFoundError):
        service.update_supplier(9, SupplierUpdate(phone='1'))


def test_delete_with_purchase_orders_is_a_conflict(service, supplier_repo, po_repo):
    po_repo.count_by_supplier.return_value = 2

    with pytest.raises(ConflictError, match="has purchase orders"):
        service.delete_supplier(1)

    supplier_repo.delete.assert_not_called()


def test_delete_missing_supplier(service, supplier_repo):
    supplier_repo.delete.return_value = False

    with pytest.raises(NotFoundError):
        service.delete_supplier(9)


def test_get_missing_supplier(service, supplier_repo):
    supplier_repo.find_by_id.return_value = None

    with pytest.raises(NotFoundError):
        service.get_supplier(9)
