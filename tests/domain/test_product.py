"""Unit tests for the Product catalog model."""

from dataclasses import replace
from decimal import Decimal

import pytest

from poscart.domain.exceptions import PackageNotFoundError, ValidationError
from poscart.domain.model.product import Package, Product
from poscart.domain.model.value_objects import Money
from tests.fakes import make_product


class TestPackages:

    def test_first_package_is_default(self):
        product = make_product("p", packages=[("UN", 1), ("CX", 6)])
        assert product.default_package.name == "UN"

    def test_unknown_package_rejected(self):
        product = make_product("p")
        with pytest.raises(PackageNotFoundError, match="'PAL' does not exist"):
            product.package("PAL")

    def test_non_positive_factor_rejected(self):
        with pytest.raises(ValidationError, match="factor must be greater than zero"):
            Package(name="CX", factor=Decimal("0"))

    def test_product_without_packages_rejected(self):
        with pytest.raises(ValidationError, match="has no packages"):
            Product(id="p", name="P", price=Money.of("1"), base_unit="UN", packages=())


class TestPricing:

    def test_package_override_price_wins(self):
        product = make_product("p", price="250", packages=[("UN", 1), ("FARDO", 6, "1400")])
        assert product.price_for(product.package("FARDO")) == Money.of("1400")

    def test_price_defaults_to_product_price_times_factor(self):
        product = make_product("p", price="250", packages=[("UN", 1), ("CX", 12)])
        assert product.price_for(product.package("CX")) == Money.of("3000")


class TestFractionalQuantities:

    def test_base_package_of_measurable_unit_allows_decimals(self):
        product = make_product("p", base_unit="KG", packages=[("KG", 1), ("BOX", 10)])
        assert product.allows_fractional(product.package("KG"))
        assert product.quantity_step(product.package("KG")) == Decimal("0.5")

    def test_bigger_package_of_measurable_unit_is_whole(self):
        product = make_product("p", base_unit="KG", packages=[("KG", 1), ("BOX", 10)])
        assert not product.allows_fractional(product.package("BOX"))
        assert product.quantity_step(product.package("BOX")) == Decimal("1")

    def test_countable_unit_is_whole(self):
        product = make_product("p", base_unit="UN")
        assert not product.allows_fractional(product.default_package)

    def test_measurable_unit_is_case_insensitive(self):
        product = make_product("p", base_unit="m2")
        assert product.is_measurable


class TestMinimumPurchase:

    def test_initial_quantity_without_minimum_is_one(self):
        product = make_product("p", packages=[("UN", 1), ("CX", 6)])
        assert product.initial_quantity(product.package("UN")) == 1
        assert product.initial_quantity(product.package("CX")) == 1

    def test_initial_quantity_raised_to_minimum(self):
        product = make_product("p", packages=[("UN", 1), ("CX", 6)], min_purchase=12)
        assert product.initial_quantity(product.package("UN")) == 12
        assert product.initial_quantity(product.package("CX")) == 2

    def test_initial_quantity_rounds_packages_up(self):
        product = make_product("p", packages=[("UN", 1), ("CX", 6)], min_purchase=13)
        assert product.initial_quantity(product.package("CX")) == 3

    def test_min_quantity_in_whole_package(self):
        product = make_product("p", packages=[("UN", 1), ("CX", 6)], min_purchase=13)
        assert product.min_quantity_in(product.package("UN")) == 13
        assert product.min_quantity_in(product.package("CX")) == 3

    def test_min_quantity_in_fractional_package_is_raw_minimum(self):
        product = make_product("p", base_unit="KG", packages=[("KG", 1)], min_purchase="2.5")
        assert product.min_quantity_in(product.default_package) == Decimal("2.5")

    def test_blocking_minimum_is_zero_when_absent(self):
        assert make_product("p").blocking_minimum == 0


class TestStock:

    def test_stock_per_warehouse(self):
        product = make_product("p", stock={"wh_1": 240, "wh_2": 60})
        assert product.stock_in("wh_2") == 60
        assert product.stock_in("wh_9") == 0
        assert product.total_stock == 300

    def test_low_stock_alert(self):
        product = make_product("p", stock={"wh_1": 100, "wh_2": 20})
        assert not product.is_below_min_stock
        low = replace(product, min_stock_level=Decimal("150"))
        assert low.is_below_min_stock
