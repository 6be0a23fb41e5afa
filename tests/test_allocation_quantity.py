import copy

from conftest import FOUR, EIGHT, JAR, MENU_DOCS, line

from bundle_pricing.schemas.models import CatalogItem, SelectionLine
from bundle_pricing.services import allocation_engine
from bundle_pricing.services.pricing_aggregator import included_units


def test_quantity_split_against_remaining_portions(catalog, select):
    sel = select(("turkey-sides", FOUR), ("roast-potatoes", FOUR), ("carrots", FOUR))
    assert line(sel, "carrots", FOUR).charged_total == 0

    sel = allocation_engine.update_quantity(sel, catalog, "carrots", FOUR, 3)
    carrots = line(sel, "carrots", FOUR)
    assert carrots.quantity == 3
    assert carrots.included_in_bundle
    assert included_units(carrots) == 1
    assert carrots.charged_total == 200


def test_quantity_without_bundle_is_plain_reprice(catalog, select):
    sel = select(("turkey", FOUR), ("roast-potatoes", EIGHT))
    sel = allocation_engine.update_quantity(sel, catalog, "roast-potatoes", EIGHT, 4)
    assert line(sel, "roast-potatoes", EIGHT).charged_total == 880


def test_quantity_on_non_side_item_is_plain_reprice(catalog, select):
    sel = select(("turkey-sides", EIGHT), ("pudding", EIGHT))
    sel = allocation_engine.update_quantity(sel, catalog, "pudding", EIGHT, 2)
    assert line(sel, "pudding", EIGHT).charged_total == 300

    sel = allocation_engine.update_quantity(sel, catalog, "turkey-sides", EIGHT, 2)
    assert line(sel, "turkey-sides", EIGHT).charged_total == 1700


def test_quantity_below_one_is_a_no_op(catalog, select):
    sel = select(("turkey-sides", FOUR), ("carrots", FOUR))
    assert allocation_engine.update_quantity(sel, catalog, "carrots", FOUR, 0) == sel
    assert allocation_engine.update_quantity(sel, catalog, "carrots", FOUR, -2) == sel


def test_quantity_on_unselected_line_is_a_no_op(catalog, select):
    sel = select(("turkey-sides", FOUR))
    assert allocation_engine.update_quantity(sel, catalog, "carrots", FOUR, 2) == sel


def test_shrinking_back_restores_full_inclusion(catalog, select):
    sel = select(("turkey-sides", EIGHT), ("roast-potatoes", EIGHT))
    sel = allocation_engine.update_quantity(sel, catalog, "roast-potatoes", EIGHT, 3)
    potatoes = line(sel, "roast-potatoes", EIGHT)
    assert included_units(potatoes) == 2
    assert potatoes.charged_total == 220

    sel = allocation_engine.update_quantity(sel, catalog, "roast-potatoes", EIGHT, 2)
    assert line(sel, "roast-potatoes", EIGHT).charged_total == 0


def test_quantity_path_weighs_other_lines_by_quantity(catalog, select):
    sel = select(("turkey-sides", FOUR), ("roast-potatoes", FOUR))
    sel = allocation_engine.update_quantity(sel, catalog, "roast-potatoes", FOUR, 2)
    assert line(sel, "roast-potatoes", FOUR).charged_total == 0

    # toggle-time tally sees one portion used, so carrots start free
    sel = select(("carrots", FOUR), selection=sel)
    assert line(sel, "carrots", FOUR).charged_total == 0

    # quantity-time tally sees two, so the same carrots lose their slot
    sel = allocation_engine.update_quantity(sel, catalog, "carrots", FOUR, 1)
    carrots = line(sel, "carrots", FOUR)
    assert not carrots.included_in_bundle
    assert carrots.charged_total == 100


def test_no_mixing_is_not_rechecked_on_quantity_change(select):
    docs = copy.deepcopy(MENU_DOCS)
    host = next(d for d in docs if d["_id"] == "turkey-sides")
    host["bundleConfig"][0]["portionValues"] = [
        {"servingSize": FOUR, "portionValue": 1},
        {"servingSize": EIGHT, "portionValue": 1},
    ]
    items = [CatalogItem.model_validate(d) for d in docs]

    sel = select(("turkey-sides", FOUR), ("roast-potatoes", FOUR), ("carrots", EIGHT), items=items)
    assert line(sel, "carrots", EIGHT).charged_total == 180

    sel = allocation_engine.update_quantity(sel, items, "carrots", EIGHT, 1)
    assert line(sel, "carrots", EIGHT).charged_total == 0


def test_sauce_quantity_split(catalog, select):
    sel = select(("turkey-sides", EIGHT), ("gravy", JAR))
    sel = allocation_engine.update_quantity(sel, catalog, "gravy", JAR, 3)
    gravy = line(sel, "gravy", JAR)
    assert included_units(gravy) == 1
    assert gravy.charged_total == 80


def test_sauce_tie_break_follows_recompute_order(catalog, select):
    host = select(("turkey-sides", EIGHT))[0]
    loaded = [
        host,
        SelectionLine(menu_item="gravy", name="Turkey Gravy", serving_size=JAR, unit_price=40,
                      charged_total=0, included_in_bundle=True),
        SelectionLine(menu_item="cranberry", name="Cranberry Sauce", serving_size=JAR, unit_price=35,
                      charged_total=0, included_in_bundle=True),
    ]
    sel = allocation_engine.recompute(loaded, catalog)

    # pinned: the line evaluated second keeps the only sauce slot
    assert line(sel, "gravy", JAR).charged_total == 40
    assert not line(sel, "gravy", JAR).included_in_bundle
    assert line(sel, "cranberry", JAR).charged_total == 0
    assert line(sel, "cranberry", JAR).included_in_bundle


def test_recompute_keeps_toggle_allocation(catalog, select):
    sel = select(("turkey-sides", EIGHT), ("gravy", JAR), ("cranberry", JAR))
    again = allocation_engine.recompute(sel, catalog)
    assert line(again, "gravy", JAR).charged_total == 0
    assert line(again, "cranberry", JAR).charged_total == 35


def test_recompute_without_combo_charges_everything(catalog):
    loaded = [
        SelectionLine(menu_item="carrots", name="Honey Glazed Carrots", serving_size=FOUR,
                      quantity=2, unit_price=100, charged_total=0, included_in_bundle=True),
    ]
    sel = allocation_engine.recompute(loaded, catalog)
    assert sel[0].charged_total == 200
    assert not sel[0].included_in_bundle


def test_weightless_side_stays_free(catalog, select):
    sel = select(("turkey-sides", EIGHT), ("sprouts", "Family tray"))
    assert line(sel, "sprouts", "Family tray").charged_total == 0

    sel = allocation_engine.update_quantity(sel, catalog, "sprouts", "Family tray", 5)
    assert line(sel, "sprouts", "Family tray").charged_total == 0


def test_overdrawn_budget_clamps_to_zero(catalog, select):
    host = select(("turkey-sides", EIGHT))[0]
    # saved order holding more free portions than the combo allows
    loaded = [
        host,
        SelectionLine(menu_item="roast-potatoes", name="Roast Potatoes", serving_size=EIGHT,
                      quantity=3, unit_price=220, charged_total=0, included_in_bundle=True),
        SelectionLine(menu_item="carrots", name="Honey Glazed Carrots", serving_size=FOUR,
                      unit_price=100, charged_total=0, included_in_bundle=True),
        SelectionLine(menu_item="sprouts", name="Brussels Sprouts", serving_size="Family tray",
                      unit_price=260, charged_total=0, included_in_bundle=True),
    ]
    sel = allocation_engine.update_quantity(loaded, catalog, "carrots", FOUR, 2)
    assert line(sel, "carrots", FOUR).charged_total == 200
    assert not line(sel, "carrots", FOUR).included_in_bundle

    sel = allocation_engine.update_quantity(sel, catalog, "sprouts", "Family tray", 1)
    assert line(sel, "sprouts", "Family tray").charged_total == 260


def test_notes_do_not_touch_prices(catalog, select):
    sel = select(("turkey-sides", FOUR), ("carrots", FOUR))
    sel = allocation_engine.update_notes(sel, "carrots", FOUR, "no honey")
    carrots = line(sel, "carrots", FOUR)
    assert carrots.notes == "no honey"
    assert carrots.charged_total == 0
    assert carrots.included_in_bundle
