"""Tests for post-commit stock and loyalty tasks."""

import logging
from decimal import Decimal

import pytest

from carwash_pos.calculators.types import LoyaltyCar, LoyaltyCustomer, Variety
from carwash_pos.services.side_effects import (
    PostCommitTask,
    find_loyalty_match,
    loyalty_accrual_task,
    run_post_commit_tasks,
    stock_decrement_tasks,
)


class TestStockDecrementTasks:
    def test_one_task_per_used_chemical(self, catalog, inventory):
        tasks = stock_decrement_tasks(["svc-armor", "svc-basic"], Variety.MEDIUM, catalog, inventory)
        # Snow Foam has zero usage at medium
        assert [t.name for t in tasks] == ["decrement_stock:chem-armor", "decrement_stock:chem-soap"]

    def test_variety_without_usage(self, catalog, inventory):
        assert stock_decrement_tasks(["svc-basic"], Variety.MOTOR, catalog, inventory) == []

    def test_unknown_service_skipped(self, catalog, inventory):
        assert stock_decrement_tasks(["svc-missing"], Variety.MEDIUM, catalog, inventory) == []

    async def test_decrements_applied(self, catalog, inventory):
        tasks = stock_decrement_tasks(["svc-basic", "svc-basic"], Variety.LARGE, catalog, inventory)
        errors = await run_post_commit_tasks(tasks)
        assert errors == []
        assert inventory.stock["chem-soap"] == Decimal("7")


class TestRunPostCommitTasks:
    async def test_failure_isolated(self, catalog, inventory, caplog):
        inventory.failing.add("chem-armor")
        tasks = stock_decrement_tasks(["svc-armor", "svc-basic"], Variety.MEDIUM, catalog, inventory)

        with caplog.at_level(logging.ERROR):
            errors = await run_post_commit_tasks(tasks)

        assert [e.task_name for e in errors] == ["decrement_stock:chem-armor"]
        assert isinstance(errors[0].cause, ConnectionError)
        # The soap decrement still ran
        assert inventory.stock["chem-soap"] == Decimal("9")
        assert "decrement_stock:chem-armor" in caplog.text

    async def test_tasks_run_once_in_order(self):
        calls = []

        def recorder(name):
            async def action():
                calls.append(name)

            return action

        tasks = [PostCommitTask(name=n, action=recorder(n)) for n in ("a", "b", "c")]
        assert await run_post_commit_tasks(tasks) == []
        assert calls == ["a", "b", "c"]


class TestLoyaltyMatch:
    @pytest.fixture
    def customers(self):
        return [
            LoyaltyCustomer(
                id="cust-1",
                name="Ana Lim",
                cars=(LoyaltyCar(car_name="Vios", plate_number="ABC 123"),),
            ),
        ]

    def test_match_ignores_case_and_whitespace(self, customers):
        assert find_loyalty_match(customers, " ana lim ", "abc 123").id == "cust-1"

    def test_plate_must_belong_to_customer(self, customers):
        assert find_loyalty_match(customers, "Ana Lim", "DEF 456") is None

    def test_name_must_match(self, customers):
        assert find_loyalty_match(customers, "Ben Cruz", "ABC 123") is None

    def test_blank_inputs(self, customers):
        assert find_loyalty_match(customers, "", "ABC 123") is None
        assert find_loyalty_match(customers, "Ana Lim", " ") is None


class TestLoyaltyAccrual:
    async def test_points_accrued(self, loyalty):
        task = loyalty_accrual_task("Ana Lim", "xyz 789", loyalty, Decimal("0.25"))
        assert await run_post_commit_tasks([task]) == []
        assert loyalty.customers["cust-1"].points == Decimal("1.25")

    async def test_no_match_is_noop(self, loyalty):
        task = loyalty_accrual_task("Walk In", "NEW 001", loyalty, Decimal("0.25"))
        assert await run_post_commit_tasks([task]) == []
        assert loyalty.customers["cust-1"].points == Decimal("1")

    async def test_directory_failure_collected(self, loyalty):
        loyalty.fail = True
        task = loyalty_accrual_task("Ana Lim", "ABC 123", loyalty, Decimal("0.25"))
        errors = await run_post_commit_tasks([task])
        assert [e.task_name for e in errors] == ["loyalty_accrual"]
