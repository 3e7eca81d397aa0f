"""
Unit tests for ReorderScheduler

The async loop is driven with asyncio.run so no event loop plugin is needed.
"""
import asyncio

import pytest
from unittest.mock import MagicMock

from invenhub.services.reorder_scheduler import ReorderScheduler


@pytest.fixture
def parts(make_product):
    products = MagicMock()
    products.find_all.return_value = ([make_product(stock=0)], 1)
    notifications = MagicMock()
    reorder = MagicMock()
    reorder.cooldown_seconds = 3600
    reorder.check_and_reorder.return_value = {
        'checked': 1, 'products_reordered': 0, 'purchase_orders_created': [],
    }
    return products, notifications, reorder


@pytest.fixture
def scheduler(parts):
    products, notifications, reorder = parts
    return ReorderScheduler(
        reorder_service=reorder,
        notification_service=notifications,
        product_repository=products,
        initial_delay=0,
        interval=3600,
    )


def test_run_once_alerts_then_reorders(scheduler, parts):
    products, notifications, reorder = parts

    report = scheduler.run_once()

    catalog = products.find_all.return_value[0]
    notifications.check_stock_levels.assert_called_once_with(catalog)
    reorder.check_and_reorder.assert_called_once_with(catalog)
    assert report['checked'] == 1
    assert scheduler.last_report == report
    assert scheduler.status()['last_run_at'] is not None


def test_loop_runs_after_initial_delay_and_stops(scheduler, parts):
    _, _, reorder = parts

    async def scenario():
        scheduler.start()
        assert scheduler.is_running
        for _ in range(50):
            if reorder.check_and_reorder.called:
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()

    asyncio.run(scenario())

    assert reorder.check_and_reorder.call_count == 1
    assert scheduler.is_running is False


def test_loop_survives_failed_pass(scheduler, parts):
    products, _, _ = parts
    products.find_all.side_effect = Exception("database unavailable")

    async def scenario():
        scheduler.start()
        for _ in range(50):
            if scheduler.last_error:
                break
            await asyncio.sleep(0.01)
        running = scheduler.is_running
        await scheduler.stop()
        return running

    assert asyncio.run(scenario()) is True
    assert scheduler.last_error == "database unavailable"


def test_stop_without_start_is_a_no_op(scheduler):
    asyncio.run(scheduler.stop())

    assert scheduler.is_running is False
