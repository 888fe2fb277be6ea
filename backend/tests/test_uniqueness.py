from datetime import datetime, timedelta
from decimal import Decimal

from sqlmodel import Session

from promo_engine.db.promotions import PromotionStore
from promo_engine.models.promotion import (
    CategoryTarget,
    ComboItem,
    ComboTarget,
    OrderTarget,
    ProductTarget,
    Promotion,
    PromotionScope,
    PromotionType,
)
from promo_engine.services.uniqueness import combo_signature, validate_promotion


def save(session: Session, target, name: str = "Promo", **kwargs) -> Promotion:
    start = datetime(2026, 1, 1)
    promo = Promotion(
        name=name,
        type=kwargs.pop("type", PromotionType.PERCENT),
        scope=target.scope,
        value=Decimal("10"),
        start_date=kwargs.pop("start_date", start),
        end_date=kwargs.pop("end_date", start + timedelta(days=10)),
        **kwargs,
    )
    promo.set_target(target)
    return PromotionStore(session).create(promo)


def combo(*pairs) -> ComboTarget:
    return ComboTarget(combo_items=[ComboItem(product_id=pid, required_qty=qty) for pid, qty in pairs])


def test_product_overlap_is_reported(session: Session) -> None:
    existing = save(session, ProductTarget(product_ids=["p1", "p2"]))

    errors = validate_promotion(PromotionStore(session), ProductTarget(product_ids=["p2", "p3"]))

    assert len(errors) == 1
    assert "p2" in errors[0]
    assert existing.id in errors[0]


def test_product_conflicts_are_all_collected(session: Session) -> None:
    first = save(session, ProductTarget(product_ids=["p1"]), name="A")
    second = save(session, ProductTarget(product_ids=["p2"]), name="B")

    errors = validate_promotion(PromotionStore(session), ProductTarget(product_ids=["p1", "p2", "p9"]))

    assert len(errors) == 2
    assert first.id in errors[0]
    assert second.id in errors[1]


def test_overlap_ignores_date_windows(session: Session) -> None:
    save(
        session,
        ProductTarget(product_ids=["p1"]),
        start_date=datetime(2020, 1, 1),
        end_date=datetime(2020, 1, 2),
    )

    errors = validate_promotion(PromotionStore(session), ProductTarget(product_ids=["p1"]))

    assert errors


def test_update_excludes_itself(session: Session) -> None:
    promo = save(session, ProductTarget(product_ids=["p1"]))

    errors = validate_promotion(PromotionStore(session), ProductTarget(product_ids=["p1"]), exclude_id=promo.id)

    assert errors == []


def test_category_overlap_is_exact_match(session: Session) -> None:
    save(session, CategoryTarget(categories=["coffee"]))
    store = PromotionStore(session)

    assert validate_promotion(store, CategoryTarget(categories=["Coffee", "tea"])) == []
    assert len(validate_promotion(store, CategoryTarget(categories=["coffee"]))) == 1


def test_scopes_do_not_conflict_with_each_other(session: Session) -> None:
    save(session, CategoryTarget(categories=["p1"]))

    assert validate_promotion(PromotionStore(session), ProductTarget(product_ids=["p1"])) == []


def test_order_scope_never_conflicts(session: Session) -> None:
    save(session, OrderTarget())

    assert validate_promotion(PromotionStore(session), OrderTarget()) == []


def test_combo_signature_is_order_independent(session: Session) -> None:
    existing = save(session, combo(("A", 2), ("B", 1)))

    errors = validate_promotion(PromotionStore(session), combo(("B", 1), ("A", 2)))

    assert errors == [f"This combo already exists in another promotion (ID: {existing.id})."]


def test_combo_with_different_quantity_does_not_conflict(session: Session) -> None:
    save(session, combo(("A", 2), ("B", 1)))

    assert validate_promotion(PromotionStore(session), combo(("A", 1), ("B", 1))) == []


def test_combo_of_different_length_does_not_conflict(session: Session) -> None:
    save(session, combo(("A", 2), ("B", 1)))
    store = PromotionStore(session)

    assert validate_promotion(store, combo(("A", 2))) == []
    assert validate_promotion(store, combo(("A", 2), ("B", 1), ("C", 1))) == []


def test_combo_reports_first_match_only(session: Session) -> None:
    save(session, combo(("A", 1)), name="first")
    save(session, combo(("A", 1)), name="second")

    errors = validate_promotion(PromotionStore(session), combo(("A", 1)))

    assert len(errors) == 1


def test_validation_is_idempotent(session: Session) -> None:
    save(session, ProductTarget(product_ids=["p1"]))
    store = PromotionStore(session)
    candidate = ProductTarget(product_ids=["p1", "p2"])

    assert validate_promotion(store, candidate) == validate_promotion(store, candidate)


def test_combo_signature_tolerates_missing_ids() -> None:
    signature = combo_signature([{"required_qty": 1}, {"product_id": "B", "required_qty": "2"}])

    assert signature == [("", 1), ("B", 2)]


class BrokenStore:
    def target_owners(self, *args, **kwargs):
        raise RuntimeError("connection lost")

    def find_all_by_scope(self, *args, **kwargs):
        raise RuntimeError("connection lost")


def test_store_failure_becomes_conflict_entry() -> None:
    errors = validate_promotion(BrokenStore(), ProductTarget(product_ids=["p1"]))

    assert len(errors) == 1
    assert "connection lost" in errors[0]


class CountingStore(PromotionStore):
    def __init__(self, db: Session):
        super().__init__(db)
        self.scope_reads = 0

    def find_all_by_scope(self, *args, **kwargs):
        self.scope_reads += 1
        return super().find_all_by_scope(*args, **kwargs)


def test_scope_is_read_once_per_check(session: Session) -> None:
    save(session, ProductTarget(product_ids=["p1"]), name="A")
    save(session, ProductTarget(product_ids=["p3"]), name="B")
    store = CountingStore(session)

    errors = validate_promotion(store, ProductTarget(product_ids=["p1", "p2", "p3", "p4"]))

    assert len(errors) == 2
    assert store.scope_reads == 1


def test_find_by_scope_and_target_returns_oldest_owner(session: Session) -> None:
    first = save(session, CategoryTarget(categories=["coffee"]), name="A")
    store = PromotionStore(session)

    assert store.find_by_scope_and_target(PromotionScope.CATEGORY, "coffee").id == first.id
    assert store.find_by_scope_and_target(PromotionScope.CATEGORY, "coffee", exclude_id=first.id) is None
    assert store.find_by_scope_and_target(PromotionScope.PRODUCT, "coffee") is None
