"""Integration tests for the Update Package use case."""

from decimal import Decimal

from poscart.application.cart_session import CartSession
from poscart.domain.exceptions import ErrorKind
from tests.fakes import pos_catalog


def _session():
    return CartSession(pos_catalog())


class TestSwitchPackage:

    def test_keeps_the_count_and_reprices(self):
        session = _session()
        session.add_line("prod_4", "UN")
        session.update_quantity("line_1", 2)

        result = session.update_package("line_1", "FARDO")

        assert result.ok
        line = session.get_lines()[0]
        assert line.package_name == "FARDO"
        assert line.quantity == Decimal("2")
        assert line.base_quantity == Decimal("12")
        assert str(line.line_total) == "2800.00 Kz"

    def test_same_package_is_a_no_op(self):
        session = _session()
        session.add_line("prod_4", "UN")
        before = session.get_lines()

        assert session.update_package("line_1", "UN").ok
        assert session.get_lines() == before

    def test_unknown_package(self):
        session = _session()
        session.add_line("prod_4", "UN")
        assert session.update_package("line_1", "PALLET").kind == ErrorKind.PACKAGE_NOT_FOUND

    def test_new_factor_is_checked_against_stock(self):
        session = _session()
        session.add_line("prod_5", "KG")
        session.update_quantity("line_1", 3)

        result = session.update_package("line_1", "BOX")  # 30 KG of 25.5

        assert result.kind == ErrorKind.STOCK_INSUFFICIENT
        assert session.get_lines()[0].package_name == "KG"

    def test_fractional_count_cannot_move_to_whole_package(self):
        session = _session()
        session.add_line("prod_5", "KG")
        session.update_quantity("line_1", "1.5")

        result = session.update_package("line_1", "BOX")

        assert result.kind == ErrorKind.INVALID_QUANTITY


class TestScenarioPackageMerge:
    """Two lines of the same product and warehouse differing only in package."""

    def _two_water_lines(self, units, packs):
        session = _session()
        session.add_line("prod_4", "UN")
        session.add_line("prod_4", "FARDO")
        session.update_quantity("line_1", units)
        session.update_quantity("line_2", packs)
        return session

    def test_switch_merges_into_the_matching_line(self):
        session = self._two_water_lines(units=3, packs=1)

        result = session.update_package("line_1", "FARDO")

        assert result.ok
        assert result.line_id == "line_2"
        (line,) = session.get_lines()
        assert line.package_name == "FARDO"
        assert line.quantity == Decimal("4")
        assert line.base_quantity == Decimal("24")

    def test_combined_stock_over_warehouse_rejected(self):
        session = _session()
        session.add_line("prod_5", "KG")
        session.add_line("prod_5", "BOX")
        session.update_quantity("line_1", 15)  # 15 + 10 of 25.5

        result = session.update_package("line_1", "BOX")  # 16 boxes = 160 KG

        assert result.kind == ErrorKind.STOCK_INSUFFICIENT
        assert [line.quantity for line in session.get_lines()] == [Decimal("15"), Decimal("1")]

    def test_combined_quantity_over_line_limit_rejected(self):
        session = self._two_water_lines(units=45, packs=10)

        result = session.update_package("line_1", "FARDO")

        assert result.kind == ErrorKind.QUANTITY_LIMIT_EXCEEDED
        assert len(session.get_lines()) == 2
