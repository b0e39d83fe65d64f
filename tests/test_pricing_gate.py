import uuid
from decimal import Decimal

import pytest

from conftest import make_astrologer, make_user
from nakshatra_talks.db import Astrologer, SessionType
from nakshatra_talks.errors import NotFoundError
from nakshatra_talks.services import (PricingGate, check_affordability,
                                      price_for, session_cost)


def test_hundred_rupees_at_ten_per_minute_can_start_for_ten_minutes():
    check = check_affordability(Decimal("100"), Decimal("10"), SessionType.CHAT)

    assert check.can_start
    assert check.minimum_required == Decimal("50.00")
    assert check.estimated_minutes == 10
    assert check.shortfall is None


def test_insufficient_balance_reports_shortfall():
    check = check_affordability(Decimal("40"), Decimal("10"), SessionType.CALL)

    assert not check.can_start
    assert check.shortfall == Decimal("10.00")
    assert check.estimated_minutes == 4


def test_balance_equal_to_minimum_is_enough():
    assert check_affordability(Decimal("50.00"), Decimal("10.00"), SessionType.CHAT).can_start


def test_free_astrologer_has_no_minimum():
    check = check_affordability(Decimal("0"), Decimal("0"), SessionType.CHAT)

    assert check.can_start
    assert check.minimum_required == Decimal("0.00")
    assert check.estimated_minutes is None


def test_minimum_minutes_is_configurable():
    check = check_affordability(
        Decimal("30"), Decimal("10"), SessionType.CHAT, minimum_minutes=Decimal("3")
    )
    assert check.can_start
    assert check.minimum_required == Decimal("30.00")


@pytest.mark.parametrize(
    "seconds, price, expected",
    [
        (90, Decimal("10"), Decimal("15.00")),
        (180, Decimal("10"), Decimal("30.00")),
        (100, Decimal("7.50"), Decimal("12.50")),
        (1, Decimal("1.00"), Decimal("0.02")),
        (0, Decimal("25.00"), Decimal("0.00")),
    ],
)
def test_session_cost_is_exact_per_second(seconds, price, expected):
    assert session_cost(seconds, price) == expected


def test_price_for_session_types():
    astrologer = Astrologer(
        phone="+911111111111",
        name="A",
        chat_price_per_minute=Decimal("8"),
        call_price_per_minute=Decimal("12"),
    )
    assert price_for(astrologer, SessionType.CHAT) == Decimal("8.00")
    assert price_for(astrologer, SessionType.CALL) == Decimal("12.00")
    assert price_for(astrologer, SessionType.VIDEO) == Decimal("12.00")


def test_validate_balance_reads_wallet_without_changing_it(db, ledger):
    user = make_user(db, balance="100.00")
    astrologer = make_astrologer(db, chat_price="10.00")
    gate = PricingGate(db, ledger)

    check = gate.validate_balance(user.id, astrologer.id, SessionType.CHAT)

    assert check.can_start
    assert check.current_balance == Decimal("100.00")
    assert check.estimated_minutes == 10
    assert ledger.get_balance(user.id) == Decimal("100.00")


def test_validate_balance_unknown_astrologer(db, ledger):
    user = make_user(db, balance="100.00")
    with pytest.raises(NotFoundError):
        PricingGate(db, ledger).validate_balance(user.id, uuid.uuid4(), SessionType.CHAT)
