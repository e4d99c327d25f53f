import pytest

from coupon_scraper.config import BLOX_FRUITS, FC_MOBILE, GENSHIN, PLAY_TOGETHER
from coupon_scraper.normalizer import (
    classify_status,
    clean_reward,
    dedupe_coupons,
    filter_active,
    is_valid_code,
    normalize_date,
    ordinal_suffix,
    parse_day_month,
)
from coupon_scraper.schema import CouponRecord, CouponStatus


# =============================================================================
# Ordinal suffix
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "day,expected",
    [
        (1, "st"), (2, "nd"), (3, "rd"), (4, "th"), (10, "th"),
        (11, "th"), (12, "th"), (13, "th"), (14, "th"),
        (21, "st"), (22, "nd"), (23, "rd"), (24, "th"), (31, "st"),
    ],
)
def test_ordinal_suffix(day, expected):
    assert ordinal_suffix(day) == expected


@pytest.mark.unit
def test_ordinal_suffix_law_for_every_day_of_month():
    for day in range(1, 32):
        if 11 <= day <= 13:
            expected = "th"
        else:
            expected = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
        assert ordinal_suffix(day) == expected


# =============================================================================
# Date normalisation
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("September 3, 2025", "3rd September"),
        ("october 5, 2025", "5th October"),
        ("Sep 21, 2025", "21st September"),
        ("9/3/2025", "3rd September"),
        ("12/22/2024", "22nd December"),
        ("2025-11-12", "12th November"),
        ("  3rd September  ", "3rd September"),
        ("Dec 31 2025", "Dec 31 2025"),
    ],
)
def test_normalize_date(raw, expected):
    assert normalize_date(raw) == expected


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["", "   ", None, "Release Date", "DATE"])
def test_normalize_date_blank_or_header_is_unknown(raw):
    assert normalize_date(raw) == "Unknown"


@pytest.mark.unit
def test_normalize_date_impossible_calendar_day_is_returned_as_is():
    assert normalize_date("February 30, 2025") == "February 30, 2025"
    assert normalize_date("13/40/2025") == "13/40/2025"


@pytest.mark.unit
def test_normalize_date_is_idempotent():
    for day in range(1, 29):
        once = normalize_date(f"March {day}, 2025")
        assert normalize_date(once) == once


@pytest.mark.unit
def test_parse_day_month():
    parsed = parse_day_month("3rd October", 2025)
    assert (parsed.year, parsed.month, parsed.day) == (2025, 10, 3)

    assert parse_day_month("15 Sep", 2025).month == 9
    assert parse_day_month("Unknown", 2025) is None
    assert parse_day_month("31st February", 2025) is None
    assert parse_day_month("00 Gems", 2025) is None


# =============================================================================
# Reward cleanup
# =============================================================================


@pytest.mark.unit
def test_clean_reward_multiplication_sign_and_whitespace():
    assert clean_reward("Primogem ×60") == "Primogem x60"
    assert clean_reward("Primogem×60") == "Primogem x60"
    assert clean_reward("  Mora   ×5,000\n") == "Mora x5,000"


@pytest.mark.unit
def test_clean_reward_strips_wiki_markup():
    assert clean_reward("[[Stellar Jade]] ×50 {{Icon|Jade}}") == "Stellar Jade x50"


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["", None, "   ", "Reward", "{{Template}}"])
def test_clean_reward_unknown(raw):
    assert clean_reward(raw) == "Unknown reward"


# =============================================================================
# Status classification
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "text,expected",
    [
        ("October 1, 2024 Expired", CouponStatus.EXPIRED),
        ("Code is INVALID", CouponStatus.EXPIRED),
        ("Hit max usage", CouponStatus.EXPIRED),
        ("Valid: Indefinite", CouponStatus.ACTIVE_INDEFINITE),
        ("October 5, 2025", CouponStatus.ACTIVE),
        ("", CouponStatus.ACTIVE),
    ],
)
def test_classify_status(text, expected):
    assert classify_status(text) == expected


# =============================================================================
# Code-shape validation
# =============================================================================


@pytest.mark.unit
def test_is_valid_code_uppercase_sources():
    assert is_valid_code("EKLP57EFE4G4", GENSHIN)
    assert is_valid_code("  GENSHINGIFT  ", GENSHIN)
    assert not is_valid_code("abc123xyz", GENSHIN)
    assert not is_valid_code("AB1", GENSHIN)
    assert not is_valid_code("CODE", GENSHIN)
    assert not is_valid_code("", GENSHIN)
    assert not is_valid_code(None, GENSHIN)


@pytest.mark.unit
def test_is_valid_code_mixed_case_sources():
    assert is_valid_code("playwithus", PLAY_TOGETHER)
    assert not is_valid_code("CouponCode", PLAY_TOGETHER)
    assert not is_valid_code("Coupon Code", PLAY_TOGETHER)
    assert not is_valid_code("ab", PLAY_TOGETHER)

    assert is_valid_code("KITT_RESET", BLOX_FRUITS)
    assert is_valid_code("Sub2Fer999", BLOX_FRUITS)


@pytest.mark.unit
@pytest.mark.parametrize(
    "token",
    ["REWARD", "REWARDS", "COPY", "EXPIRED", "OCTOBER", "SEPTEMBER", "TICKETS",
     "12345678", "A1234567", "COPYCODE1", "EXPIRED12", "MENUITEM", "ABC12", "A" * 21],
)
def test_is_valid_code_fc_mobile_rejects(token):
    assert not is_valid_code(token, FC_MOBILE)


@pytest.mark.unit
@pytest.mark.parametrize("token", ["ABCD1234", "FCM2025GIFT", "TOTS25"])
def test_is_valid_code_fc_mobile_accepts(token):
    assert is_valid_code(token, FC_MOBILE)


# =============================================================================
# Collection helpers
# =============================================================================


@pytest.mark.unit
def test_dedupe_keeps_first_seen():
    coupons = [
        CouponRecord(code="AAAA1111", reward="first"),
        CouponRecord(code="BBBB2222"),
        CouponRecord(code="AAAA1111", reward="second"),
    ]

    unique = dedupe_coupons(coupons)

    assert [c.code for c in unique] == ["AAAA1111", "BBBB2222"]
    assert unique[0].reward == "first"


@pytest.mark.unit
def test_filter_active_drops_expired():
    coupons = [
        CouponRecord(code="LIVE1", status=CouponStatus.ACTIVE),
        CouponRecord(code="FOREVER1", status=CouponStatus.ACTIVE_INDEFINITE),
        CouponRecord(code="DEAD1", status=CouponStatus.EXPIRED),
    ]

    assert [c.code for c in filter_active(coupons)] == ["LIVE1", "FOREVER1"]


@pytest.mark.unit
@pytest.mark.parametrize("code", ["SUB2-FER!", "Bluxxy.Update", "x2@EXP"])
def test_is_valid_code_blox_fruits_accepts_punctuation(code):
    assert is_valid_code(code, BLOX_FRUITS)


@pytest.mark.unit
@pytest.mark.parametrize("code", ["ab", "two words", "Code"])
def test_is_valid_code_blox_fruits_rejects(code):
    assert not is_valid_code(code, BLOX_FRUITS)
