"""
Product form state tests: slug derivation, variant classification,
hydration and the reducers' validation rules.

Run with: pytest tests/test_product_form.py -v
"""

import pytest

from shopdesk.modules.product_form import state as fs
from shopdesk.modules.product_form.slug import slugify
from shopdesk.modules.product_form.state import FormValidationError
from shopdesk.modules.product_form.variants import (
    AttributeVariant,
    BundleVariant,
    bundle_rows_from_variants,
    decode_variants,
    is_bundle_array,
    project_bundle_rows,
    to_number,
)


def bundle(qty, price, mrp=None, **options):
    options = dict(options, bundleQty=qty)
    return {"options": options, "price": price, "mrp": mrp if mrp is not None else price, "stock": 0}


# ---------------------------------------------------------------------------
# Slug
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("name, expected", [
    ("Men's T-Shirt!!  2.0", "mens-t-shirt-20"),
    ("  Cotton   Kurta  ", "cotton-kurta"),
    ("--Hello--World--", "hello-world"),
    ("snake_case name", "snake_case-name"),
    ("Café Mug", "caf-mug"),
    ("", ""),
])
def test_slugify(name, expected):
    assert slugify(name) == expected


def test_setting_name_regenerates_slug():
    state = fs.set_field(fs.initial_state(), "name", "Summer Dress")
    assert state.info["slug"] == "summer-dress"

    state = fs.set_field(state, "name", "Summer Dress XL")
    assert state.info["slug"] == "summer-dress-xl"


def test_slug_cannot_be_edited_directly():
    with pytest.raises(FormValidationError):
        fs.set_field(fs.initial_state(), "slug", "custom")


def test_unknown_field_rejected():
    with pytest.raises(ValueError):
        fs.set_field(fs.initial_state(), "stock_status", "x")


# ---------------------------------------------------------------------------
# Variant classification
# ---------------------------------------------------------------------------

def test_empty_array_is_not_bundle():
    assert is_bundle_array([]) is False


def test_all_bundle_qty_entries_classify_as_bundle():
    assert is_bundle_array([bundle(1, 100), bundle(2, 180)]) is True


def test_zero_bundle_qty_still_counts_as_present():
    assert is_bundle_array([bundle(0, 100)]) is True


def test_colour_or_size_makes_array_attribute_style():
    assert is_bundle_array([bundle(1, 100), bundle(2, 180, color="Red")]) is False
    assert is_bundle_array([bundle(1, 100, size="M")]) is False


def test_missing_bundle_qty_on_any_entry_makes_array_attribute_style():
    mixed = [bundle(1, 100), {"options": {"title": "Plain"}, "price": 100, "mrp": 100, "stock": 0}]
    assert is_bundle_array(mixed) is False


def test_decode_keeps_array_homogeneous():
    decoded = decode_variants([bundle(1, 100), bundle(2, 180)])
    assert all(isinstance(v, BundleVariant) for v in decoded)

    decoded = decode_variants([{"options": {"color": "Red"}, "price": 10, "mrp": 12, "stock": 3}])
    assert all(isinstance(v, AttributeVariant) for v in decoded)
    assert decoded[0].kind == "attribute"


def test_projected_bundles_classify_as_bundle():
    rows = [
        {"title": "Buy 1", "qty": 1, "price": "499", "mrp": "", "stock": 0, "tag": ""},
        {"title": "Bundle of 2", "qty": 2, "price": "899", "mrp": "999", "stock": 5, "tag": "MOST_POPULAR"},
    ]
    projected = project_bundle_rows(rows)
    assert is_bundle_array(projected)
    assert is_bundle_array([v.to_dict() for v in projected])


def test_projection_drops_rows_without_positive_qty_or_price():
    rows = [
        {"title": "Buy 1", "qty": 1, "price": "499", "mrp": "", "stock": 0, "tag": ""},
        {"title": "Bundle of 2", "qty": 2, "price": "0", "mrp": "", "stock": 0, "tag": "MOST_POPULAR"},
        {"title": "Bundle of 3", "qty": 3, "price": "1299", "mrp": "1500", "stock": 0, "tag": ""},
    ]
    projected = project_bundle_rows(rows)
    assert [v.bundle_qty for v in projected] == [1, 3]


def test_projection_fills_blank_mrp_with_price():
    projected = project_bundle_rows([{"title": "", "qty": "2", "price": "350", "mrp": "", "stock": "", "tag": ""}])
    variant = projected[0]
    assert variant.mrp == 350
    assert variant.stock == 0
    assert variant.to_dict() == {"options": {"bundleQty": 2}, "price": 350, "mrp": 350, "stock": 0}


def test_bundle_rows_sorted_by_quantity_with_default_titles():
    rows = bundle_rows_from_variants([bundle(3, 1200), bundle(1, 450), bundle(2, 850)])
    assert [r["qty"] for r in rows] == [1, 2, 3]
    assert [r["title"] for r in rows] == ["Buy 1", "Bundle of 2", "Bundle of 3"]


def test_to_number():
    assert to_number("") == 0
    assert to_number(None) == 0
    assert to_number("12.0") == 12
    assert to_number("12.5") == 12.5
    assert to_number("abc") is None


# ---------------------------------------------------------------------------
# Hydration
# ---------------------------------------------------------------------------

def stored_product(**overrides):
    product = {
        "_id": "p1",
        "name": "Linen Shirt",
        "slug": "linen-shirt",
        "description": "<p>Breathable</p>",
        "shortDescription": "Cool",
        "mrp": 1999,
        "price": 1499,
        "images": ["/img/1.jpg", "/img/2.jpg"],
        "category": {"_id": "legacy", "name": "Old"},
        "categories": [],
        "hasVariants": False,
        "variants": [],
        "attributes": {"brand": "Acme", "badges": ["Hot Deal"]},
        "tags": ["summer", "linen", "summer"],
    }
    product.update(overrides)
    return product


def test_hydrate_new_product_gives_defaults():
    state = fs.hydrate(fs.initial_state(), None)
    assert state.is_initialized
    assert state.product_id is None
    assert state.info["allowReturn"] is True
    assert state.info["imageAspectRatio"] == "1:1"
    assert [r["qty"] for r in state.bulk_rows] == [1, 2, 3]
    assert state.bulk_rows[1]["tag"] == "MOST_POPULAR"


def test_hydrate_copies_product_fields():
    state = fs.hydrate(fs.initial_state(), stored_product())
    assert state.product_id == "p1"
    assert state.info["brand"] == "Acme"
    assert state.info["badges"] == ["Hot Deal"]
    assert state.info["tags"] == ["summer", "linen"]
    assert state.images["1"] == "/img/1.jpg"
    assert state.images["2"] == "/img/2.jpg"
    assert state.images["3"] is None


def test_hydrate_falls_back_to_legacy_category():
    state = fs.hydrate(fs.initial_state(), stored_product())
    assert state.selected_categories == ["legacy"]

    state = fs.hydrate(fs.initial_state(), stored_product(categories=["c1", "c2"]))
    assert state.selected_categories == ["c1", "c2"]


def test_hydrate_bundle_product_enables_bundle_mode():
    product = stored_product(hasVariants=True, variants=[bundle(2, 850), bundle(1, 450)])
    state = fs.hydrate(fs.initial_state(), product)
    assert state.bulk_enabled
    assert [r["qty"] for r in state.bulk_rows] == [1, 2]


def test_rehydrating_same_product_keeps_edits():
    state = fs.hydrate(fs.initial_state(), stored_product())
    state = fs.set_field(state, "name", "Edited Name")

    again = fs.hydrate(state, stored_product(name="Server Name"))
    assert again.info["name"] == "Edited Name"


def test_hydrating_different_product_resets():
    state = fs.hydrate(fs.initial_state(), stored_product())
    state = fs.set_field(state, "name", "Edited Name")

    other = fs.hydrate(state, stored_product(_id="p2", name="Other"))
    assert other.product_id == "p2"
    assert other.info["name"] == "Other"


def test_close_rearms_hydration():
    state = fs.hydrate(fs.initial_state(), stored_product())
    state = fs.set_field(state, "name", "Edited Name")
    state = fs.close(state)

    reopened = fs.hydrate(state, stored_product())
    assert reopened.info["name"] == "Linen Shirt"


def test_reducers_leave_previous_state_untouched():
    before = fs.hydrate(fs.initial_state(), stored_product())
    after = fs.add_tag(before, "cotton")
    assert "cotton" in after.info["tags"]
    assert "cotton" not in before.info["tags"]


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------

def test_tags_trim_and_ignore_duplicates():
    state = fs.add_tag(fs.initial_state(), "  summer ")
    state = fs.add_tag(state, "summer")
    state = fs.add_tag(state, "   ")
    assert state.info["tags"] == ["summer"]

    state = fs.remove_tag(state, 0)
    assert state.info["tags"] == []


def test_badge_and_aspect_ratio_enumerations():
    state = fs.toggle_badge(fs.initial_state(), "Best Seller")
    assert state.info["badges"] == ["Best Seller"]
    state = fs.toggle_badge(state, "Best Seller")
    assert state.info["badges"] == []

    with pytest.raises(FormValidationError):
        fs.toggle_badge(state, "Mega Sale")
    with pytest.raises(FormValidationError):
        fs.set_aspect_ratio(state, "2:1")


def test_category_toggle():
    state = fs.toggle_category(fs.initial_state(), "c1")
    state = fs.toggle_category(state, "c2")
    assert state.selected_categories == ["c1", "c2"]
    state = fs.toggle_category(state, "c1")
    assert state.selected_categories == ["c2"]


def test_review_requires_name_and_comment():
    state = fs.set_review_input(fs.initial_state(), name="Asha")
    with pytest.raises(FormValidationError, match="Please fill all review fields"):
        fs.add_review(state)

    state = fs.set_review_input(state, comment="Lovely fabric", rating=4)
    state = fs.add_review(state)
    assert state.info["reviews"][0]["comment"] == "Lovely fabric"
    assert state.review_input == fs.empty_review()


def test_enabling_bundles_turns_on_variants():
    state = fs.set_bulk_enabled(fs.initial_state(), True)
    assert state.has_variants is True


def test_update_variant_merges_options():
    state = fs.add_variant(fs.initial_state())
    state = fs.update_variant(state, 0, options={"color": "Red"}, price=250)
    state = fs.update_variant(state, 0, options={"size": "M"})
    variant = state.variants[0]
    assert variant.options == {"color": "Red", "size": "M"}
    assert variant.price == 250


def test_bundle_tag_must_be_known():
    with pytest.raises(FormValidationError):
        fs.update_bulk_row(fs.initial_state(), 0, tag="CHEAPEST")


# ---------------------------------------------------------------------------
# Frequently bought together
# ---------------------------------------------------------------------------

def test_fifth_fbt_product_rejected_and_state_unchanged():
    state = fs.initial_state()
    for i in range(4):
        state = fs.add_fbt_product(state, {"_id": f"x{i}", "name": f"Item {i}"})

    with pytest.raises(FormValidationError, match="Maximum 4 products allowed"):
        fs.add_fbt_product(state, {"_id": "x5", "name": "Item 5"})
    assert [p["_id"] for p in state.fbt_products] == ["x0", "x1", "x2", "x3"]


def test_fbt_rejects_self_and_duplicates():
    state = fs.hydrate(fs.initial_state(), stored_product())
    with pytest.raises(FormValidationError):
        fs.add_fbt_product(state, {"_id": "p1"})

    state = fs.add_fbt_product(state, {"_id": "x1"})
    with pytest.raises(FormValidationError, match="Product already selected"):
        fs.add_fbt_product(state, {"_id": "x1"})


def test_fbt_candidates_exclude_self_and_selected():
    state = fs.hydrate(fs.initial_state(), stored_product())
    state = fs.add_fbt_product(state, {"_id": "x1", "name": "Shirt Belt"})
    products = [
        {"_id": "p1", "name": "Linen Shirt"},
        {"_id": "x1", "name": "Shirt Belt"},
        {"_id": "x2", "name": "Shirt Stays", "sku": "ST-1"},
        {"_id": "x3", "name": "Cufflinks", "sku": "SHIRT-CL"},
        {"_id": "x4", "name": "Socks"},
    ]
    found = fs.fbt_candidates(state, products, "shirt")
    assert [p["_id"] for p in found] == ["x2", "x3"]
    assert fs.fbt_candidates(state, products, "  ") == []


def test_load_fbt_config():
    state = fs.load_fbt_config(fs.initial_state(), {
        "enableFBT": True,
        "products": [{"_id": "x1"}],
        "bundlePrice": 999.0,
        "bundleDiscount": None,
    })
    assert state.enable_fbt is True
    assert state.fbt_products == [{"_id": "x1"}]
    assert state.fbt_bundle_price == 999.0
    assert state.fbt_bundle_discount == ""


def test_stored_bundle_rows_editable_after_leaving_bundle_mode():
    product = stored_product(hasVariants=True, variants=[bundle(1, 100), bundle(2, 180)])
    state = fs.hydrate(fs.initial_state(), product)
    state = fs.set_bulk_enabled(state, False)

    state = fs.update_variant(state, 0, price=120)

    variant = state.variants[0]
    assert isinstance(variant, AttributeVariant)
    assert variant.price == 120
    assert variant.options == {"bundleQty": 1}
    assert isinstance(state.variants[1], BundleVariant)
