"""Integration tests for the Update Quantity use case."""

from decimal import Decimal

import pytest

from poscart.application.cart_session import CartSession
from poscart.application.update_quantity import UpdateQuantityHandler
from poscart.domain.exceptions import ErrorKind
from poscart.domain.model.cart import Cart
from poscart.domain.model.session_state import Rejected
from poscart.domain.service.stock_availability_service import (
    StockAvailabilityService,
)
from tests.fakes import WAREHOUSES, FakeCatalogRepository, make_product, pos_catalog


def _session_with(product_id, package_name=None):
    session = CartSession(pos_catalog())
    assert session.add_line(product_id, package_name).ok
    return session


def _quantity(session, line_id="line_1"):
    return next(line.quantity for line in session.get_lines() if line.id == line_id)


class TestUpdateQuantity:

    def test_sets_the_package_count(self):
        session = _session_with("prod_4", "FARDO")

        result = session.update_quantity("line_1", 4)

        assert result.ok
        line = session.get_lines()[0]
        assert line.quantity == Decimal("4")
        assert line.base_quantity == Decimal("24")

    def test_is_a_replacement_not_an_addition(self):
        session = _session_with("prod_2")  # 50 KG in sacks of 5
        assert session.update_quantity("line_1", 10).ok
        assert session.update_quantity("line_1", 10).ok
        assert _quantity(session) == Decimal("10")

    def test_accepts_text_input(self):
        session = _session_with("prod_5", "KG")
        assert session.update_quantity("line_1", "2.5").ok
        assert _quantity(session) == Decimal("2.5")

    def test_fifty_first_unit_rejected(self):
        session = _session_with("prod_4", "UN")
        assert session.update_quantity("line_1", 50).ok

        result = session.update_quantity("line_1", 51)

        assert result.kind == ErrorKind.QUANTITY_LIMIT_EXCEEDED
        assert _quantity(session) == Decimal("50")

    def test_over_stock_rejected(self):
        session = _session_with("prod_1", "CX")  # 100 UN in wh_1, cases of 6

        result = session.update_quantity("line_1", 17)

        assert result.kind == ErrorKind.STOCK_INSUFFICIENT
        assert _quantity(session) == Decimal("2")

    @pytest.mark.parametrize("quantity", [15, 16])
    def test_orphan_remainder_rejected(self, quantity):
        session = _session_with("prod_1", "CX")
        result = session.update_quantity("line_1", quantity)
        assert result.kind == ErrorKind.ORPHAN_STOCK_VIOLATION

    def test_remainder_of_one_minimum_is_fine(self):
        session = _session_with("prod_1", "CX")
        assert session.update_quantity("line_1", 14).ok  # 84 of 100, 16 left

    @pytest.mark.parametrize("quantity", ["abc", "nan", "inf", "-1", -2])
    def test_invalid_values_rejected(self, quantity):
        session = _session_with("prod_4", "UN")
        result = session.update_quantity("line_1", quantity)
        assert result.kind == ErrorKind.INVALID_QUANTITY
        assert _quantity(session) == Decimal("1")

    def test_fractional_quantity_on_whole_package_rejected(self):
        session = _session_with("prod_5", "BOX")
        result = session.update_quantity("line_1", "1.5")
        assert result.kind == ErrorKind.INVALID_QUANTITY

    def test_fractional_quantity_on_counted_unit_rejected(self):
        session = _session_with("prod_4", "UN")
        assert session.update_quantity("line_1", "1.5").kind == ErrorKind.INVALID_QUANTITY

    def test_zero_is_accepted_and_flagged(self):
        session = _session_with("prod_1", "UN")

        result = session.update_quantity("line_1", 0)

        assert result.ok
        summary = session.get_summary()
        assert summary.error_kinds["line_1"] == [ErrorKind.MIN_PURCHASE_NOT_MET]
        assert not summary.can_finalize

    def test_unknown_line(self):
        session = _session_with("prod_4")
        assert session.update_quantity("line_9", 2).kind == ErrorKind.LINE_NOT_FOUND


class TestStepping:

    def test_increment_whole_package(self):
        session = _session_with("prod_1", "UN")
        assert session.increment_quantity("line_1").ok
        assert _quantity(session) == Decimal("13")

    def test_decrement_stops_at_the_minimum(self):
        session = _session_with("prod_1", "UN")
        session.increment_quantity("line_1")

        session.decrement_quantity("line_1")
        session.decrement_quantity("line_1")

        assert _quantity(session) == Decimal("12")

    def test_half_steps_for_measurable_base_unit(self):
        session = _session_with("prod_5", "KG")

        session.increment_quantity("line_1")
        assert _quantity(session) == Decimal("1.5")

        session.decrement_quantity("line_1")
        session.decrement_quantity("line_1")
        assert _quantity(session) == Decimal("1")

    def test_increment_is_validated(self):
        session = _session_with("prod_4", "UN")
        session.update_quantity("line_1", 50)

        result = session.increment_quantity("line_1")

        assert result.kind == ErrorKind.QUANTITY_LIMIT_EXCEEDED

    def test_unknown_line(self):
        session = _session_with("prod_4")
        assert session.increment_quantity("line_9").kind == ErrorKind.LINE_NOT_FOUND


class TestSettingTheCurrentQuantity:

    @staticmethod
    def _assert_no_op(session, line):
        before_lines = session.get_lines()
        before_state = session.state

        for quantity in (line.quantity, str(line.quantity)):
            result = session.update_quantity(line.id, quantity)

            assert result.ok
            assert result.line_id == line.id
            assert session.get_lines() == before_lines
            assert session.state == before_state

    def test_every_line_of_a_mixed_cart(self):
        session = CartSession(pos_catalog())
        session.add_line("prod_1", "UN")
        session.add_line("prod_4", "FARDO")
        session.add_line("prod_5", "KG")
        session.update_quantity("line_3", "2.5")
        session.add_line("prod_3")

        for line in session.get_lines():
            self._assert_no_op(session, line)

    def test_keeps_an_earlier_rejection(self):
        session = _session_with("prod_4", "UN")
        session.update_quantity("line_1", 51)
        assert isinstance(session.state, Rejected)

        self._assert_no_op(session, session.get_lines()[0])

    def test_line_flagged_by_the_summary(self):
        session = _session_with("prod_1", "UN")
        session.update_quantity("line_1", 3)  # below the minimum purchase

        self._assert_no_op(session, session.get_lines()[0])

    def test_after_a_removal_leaves_an_unsellable_remainder(self):
        juice = make_product(
            "p1", packages=[("UN", 1), ("CX", 6)], stock={"wh_1": 32}, min_purchase=12
        )
        session = CartSession(FakeCatalogRepository([juice], list(WAREHOUSES)))
        session.add_line("p1", "UN")
        session.update_quantity("line_1", 8)
        session.add_line("p1", "CX")
        assert session.update_quantity("line_2", 4).ok  # 8 + 24 empties wh_1
        session.remove_line("line_1")
        assert session.get_summary().error_kinds["line_2"] == [ErrorKind.ORPHAN_STOCK_VIOLATION]

        self._assert_no_op(session, session.get_lines()[0])

    def test_a_different_quantity_is_still_validated(self):
        juice = make_product(
            "p1", packages=[("UN", 1), ("CX", 6)], stock={"wh_1": 32}, min_purchase=12
        )
        session = CartSession(FakeCatalogRepository([juice], list(WAREHOUSES)))
        session.add_line("p1", "UN")
        session.update_quantity("line_1", 8)
        session.add_line("p1", "CX")
        session.update_quantity("line_2", 4)
        session.remove_line("line_1")

        result = session.update_quantity("line_2", 5)  # 30 of 32 leaves 2

        assert result.kind == ErrorKind.ORPHAN_STOCK_VIOLATION

    def test_still_refused_while_a_decision_is_pending(self):
        session = _session_with("prod_4", "UN")
        session.add_line("prod_4", "UN")

        result = session.update_quantity("line_1", 1)

        assert result.kind == ErrorKind.MERGE_CONFLICT_PENDING


class TestUpdateQuantityHandler:

    def test_current_quantity_skips_validation(self):
        juice = make_product("p1", stock={"wh_1": 20}, min_purchase=12)
        repo = FakeCatalogRepository([juice], list(WAREHOUSES))
        cart = Cart()
        line = cart.add_line(juice, juice.default_package, "wh_1", Decimal("13"))  # leaves 7
        handler = UpdateQuantityHandler(repo, cart, StockAvailabilityService(repo))

        assert handler.handle(line.id, "13") == line
        assert cart.lines == (line,)
