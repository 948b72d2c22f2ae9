import pytest

from store.persistence import CART_KEY, COUPON_KEY, JsonFileKeyValueStore, KeyValueStore
from store.sessions import SessionRegistry
from store.state import StoreStateMachine


class BrokenStorage(KeyValueStore):
    def get(self, key):
        raise OSError("disk unavailable")

    def set(self, key, value):
        raise OSError("disk unavailable")

    def remove(self, key):
        raise OSError("disk unavailable")


def _ids(products):
    return [p.id for p in products]


class TestCatalogView:
    def test_starts_with_full_catalog(self, store, products):
        assert store.visible_products == list(products)
        assert store.current_page == "home"

    def test_search_updates_visible_products(self, store):
        result = store.search_products("blue jacket")
        assert result["success"]
        assert store.visible_products[0].id == 1

    def test_failed_search_keeps_view(self, store, products):
        store.filter_category("clothing")
        assert store.search_products("")["success"] is False
        assert len(store.visible_products) == 2

    def test_whitespace_search_shows_everything(self, store, products):
        store.filter_category("clothing")
        assert store.search_products("   ")["success"] is True
        assert store.visible_products == list(products)

    def test_unknown_category_leaves_view_unchanged(self, store):
        store.filter_category("clothing")
        before = list(store.visible_products)
        result = store.filter_category("bags")
        assert result["success"] is False
        assert "bags" in result["error"]
        assert store.visible_products == before
        assert store.active_category == "clothing"

    def test_filter_is_case_insensitive(self, store):
        result = store.filter_category("Clothing")
        assert result["count"] == 2
        assert store.active_category == "clothing"

    def test_filter_keeps_sort_order(self, store):
        store.sort_products("desc")
        store.filter_category("accessories")
        assert _ids(store.visible_products) == [5, 2, 4]

    def test_sort_ascending(self, store):
        store.sort_products("asc")
        prices = [p.price for p in store.visible_products]
        assert prices == sorted(prices)

    def test_invalid_sort_order(self, store):
        assert store.sort_products("price")["success"] is False
        assert store.sort_order is None

    def test_reset_filters(self, store, products):
        store.filter_category("clothing")
        store.sort_products("desc")
        store.reset_filters()
        assert store.visible_products == list(products)
        assert store.active_category is None
        assert store.sort_order is None


class TestCart:
    def test_adding_twice_increments_quantity(self, store):
        store.add_to_cart(1)
        result = store.add_to_cart(1)
        assert result["quantity"] == 2
        assert len(store.cart) == 1
        assert store.cart_item_count == 2

    def test_integral_float_id_is_accepted(self, store):
        assert store.add_to_cart(2.0)["success"]

    @pytest.mark.parametrize("bad_id", ["abc", 0, -1, True, 1.5, None])
    def test_invalid_product_id(self, store, bad_id):
        result = store.add_to_cart(bad_id)
        assert result["success"] is False
        assert "Invalid product ID" in result["error"]
        assert store.cart == []

    def test_unknown_product(self, store):
        result = store.add_to_cart(99)
        assert result["success"] is False
        assert "searchProducts()" in result["error"]

    def test_remove_some_units(self, store):
        store.add_to_cart(1)
        store.add_to_cart(1)
        result = store.remove_from_cart(1, quantity=1)
        assert result["quantity"] == 1
        assert store.cart_item_count == 1

    def test_remove_line(self, store):
        store.add_to_cart(1)
        store.add_to_cart(1)
        store.remove_from_cart(1)
        assert store.cart == []

    def test_remove_missing_line(self, store):
        result = store.remove_from_cart(3)
        assert result == {"success": False, "error": "Product not in cart"}

    def test_clear_cart(self, store):
        store.add_to_cart(1)
        store.add_to_cart(2)
        store.clear_cart()
        assert store.cart_item_count == 0

    def test_total_with_coupon(self, store):
        store.add_to_cart(1)
        store.add_to_cart(2)
        store.apply_coupon("save10", 10)
        assert store.cart_total() == {
            "subtotal": 140,
            "discount": 14,
            "total": 126,
            "coupon": {"code": "SAVE10", "discountPercent": 10},
        }


class TestCoupons:
    @pytest.mark.parametrize("percent", [-5, 101, "10", True])
    def test_apply_coupon_rejects_bad_percent(self, store, percent):
        assert store.apply_coupon("X", percent)["success"] is False
        assert store.applied_coupon is None

    def test_apply_coupon_rejects_empty_code(self, store):
        assert store.apply_coupon("  ", 10)["success"] is False

    def test_remove_coupon(self, store):
        store.apply_coupon("SAVE10", 10)
        store.remove_coupon()
        assert store.applied_coupon is None


class TestNegotiation:
    def test_approved_discount_applies_coupon(self, store, jacket):
        result = store.negotiate_discount("It's my birthday, can I get a discount?", 1)
        assert result["approved"]
        assert result["product"]["discountedPrice"] >= jacket.bottom_price
        assert store.applied_coupon.code == result["couponCode"]
        assert result["couponCode"] in store.generated_coupon_codes

    def test_rude_request_sets_penalty_coupon(self, products, high_rng):
        store = StoreStateMachine(products, rng=high_rng)
        store.add_to_cart(1)
        result = store.negotiate_discount("this is a ripoff")
        assert result["approved"] is False
        assert result["reason"] == "rude_behavior"
        assert store.applied_coupon.discount_percent == -20
        assert store.applied_coupon.code.startswith("PENALTY-")
        assert store.cart_total()["total"] == 120
        assert "20%" in result["message"]

    def test_lowball_keeps_existing_coupon(self, store):
        store.apply_coupon("SAVE10", 10)
        result = store.negotiate_discount("Can I have it for $10 only?", 1)
        assert result["reason"] == "lowball_offer"
        assert store.applied_coupon.code == "SAVE10"

    def test_target_defaults_to_first_cart_item(self, store):
        store.add_to_cart(2)
        store.navigate_to_product(1)
        result = store.negotiate_discount("It's my birthday")
        assert result["product"]["id"] == 2

    def test_target_falls_back_to_current_product(self, store):
        store.navigate_to_product(3)
        result = store.negotiate_discount("It's my birthday")
        assert result["product"]["id"] == 3

    def test_target_by_name(self, store):
        result = store.negotiate_discount("It's my birthday", "the silk scarf")
        assert result["product"]["id"] == 5

    def test_no_target(self, store):
        result = store.negotiate_discount("It's my birthday")
        assert result["success"] is False
        assert store.negotiation_history == []

    def test_history_is_recorded(self, store):
        store.negotiate_discount("Can I get a discount?", 1)
        [record] = store.negotiation_history
        assert record.product_name == "Blue Jacket"
        assert record.reason == "no_reason"
        assert record.to_dict()["productId"] == 1


class TestNavigation:
    def test_navigate_to_page(self, store):
        result = store.navigate_to("cart")
        assert result == {"success": True, "page": "cart", "productId": None}
        assert store.current_page == "cart"

    def test_invalid_page(self, store):
        assert store.navigate_to("admin")["success"] is False
        assert store.current_page == "home"

    def test_navigate_to_product(self, store):
        store.navigate_to_product(3)
        assert store.current_page == "product"
        assert store.current_product_id == 3
        assert store.recently_viewed == [3]

    def test_navigate_to_unknown_product(self, store):
        assert store.navigate_to_product(99)["success"] is False
        assert store.current_product_id is None


class TestRecommendations:
    def test_related_items_come_first(self, store):
        store.navigate_to_product(1)
        result = store.recommend_products()
        assert _ids(result["products"]) == [6, 3, 2, 4]

    def test_without_history_uses_top_rated(self, store):
        result = store.recommend_products()
        assert _ids(result["products"]) == [3, 1, 2, 6]

    def test_carted_items_are_excluded(self, store):
        store.add_to_cart(3)
        ids = _ids(store.recommend_products()["products"])
        assert 3 not in ids


class TestPersistence:
    def test_cart_and_coupon_survive_restart(self, products, storage, store):
        store.add_to_cart(1)
        store.add_to_cart(1)
        store.apply_coupon("SAVE10", 10)

        restored = StoreStateMachine(products, storage=storage)
        assert restored.cart_item_count == 2
        assert restored.applied_coupon.code == "SAVE10"

    def test_removing_coupon_clears_storage(self, storage, store):
        store.apply_coupon("SAVE10", 10)
        store.remove_coupon()
        assert storage.get(COUPON_KEY) is None

    def test_storage_failures_are_not_fatal(self, products):
        store = StoreStateMachine(products, storage=BrokenStorage())
        assert store.add_to_cart(1)["success"]
        assert store.cart_item_count == 1

    def test_unusable_saved_entries_are_dropped(self, products, storage):
        storage.set(CART_KEY, [
            {"productId": 99, "quantity": 1},
            {"productId": True, "quantity": 1},
            {"productId": 1, "quantity": 2},
            {"productId": 1, "quantity": 1},
            {"productId": 2, "quantity": 0},
            "junk",
        ])
        storage.set(COUPON_KEY, {"code": "HUGE", "discountPercent": 150})
        store = StoreStateMachine(products, storage=storage)
        assert [(line.product.id, line.quantity) for line in store.cart] == [(1, 3)]
        assert store.applied_coupon is None

    def test_json_file_store(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path, namespace="user/42")
        assert kv.get(CART_KEY) is None
        kv.set(CART_KEY, [{"productId": 1, "quantity": 2}])
        assert kv.get(CART_KEY) == [{"productId": 1, "quantity": 2}]
        assert (tmp_path / "user_42" / "cart.json").exists()
        kv.remove(CART_KEY)
        kv.remove(CART_KEY)
        assert kv.get(CART_KEY) is None

    @pytest.mark.parametrize("namespace", ["..", ".", "...", ""])
    def test_dot_namespaces_stay_inside_directory(self, tmp_path, namespace):
        root = tmp_path / "carts"
        kv = JsonFileKeyValueStore(root, namespace=namespace)
        kv.set(CART_KEY, [])
        assert (root / "default" / "cart.json").exists()
        assert not (tmp_path / "cart.json").exists()

    def test_session_id_cannot_escape_storage_dir(self, products, tmp_path):
        root = tmp_path / "carts"
        SessionRegistry(products, storage_dir=root).get("..").store.add_to_cart(1)
        assert not (tmp_path / "cart.json").exists()
        assert (root / "default" / "cart.json").exists()


class TestSnapshot:
    def test_snapshot_is_camel_case(self, store):
        store.add_to_cart(1)
        snapshot = store.snapshot()
        assert snapshot["cartItemCount"] == 1
        assert snapshot["cartItems"][0]["product"]["id"] == 1
        assert snapshot["cartTotal"]["total"] == 100
        assert snapshot["appliedCoupon"] is None
        assert len(snapshot["visibleProducts"]) == 6
