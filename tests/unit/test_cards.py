"""卡牌定义测试"""
import pytest
import numpy as np

from core.cards import (
    ALL_CARDS,
    FULL_DECK,
    NUM_CARDS,
    CardType,
    RibbonType,
    get_card,
    card_month,
    card_type,
    cards_of_month,
    cards_of_type,
    card_value,
    is_bird,
    junk_value,
    cards_to_array,
    month_counts,
    cards_to_str,
)


class TestCatalog:
    """牌目录测试"""

    def test_all_ids(self):
        for cid in range(NUM_CARDS):
            card = get_card(cid)
            assert card.id == cid
            assert 1 <= card.month <= 12

    def test_four_per_month(self):
        for month in range(1, 13):
            assert len(cards_of_month(month)) == 4

    def test_type_counts(self):
        assert len(cards_of_type(CardType.LIGHT)) == 5
        assert len(cards_of_type(CardType.ANIMAL)) == 9
        assert len(cards_of_type(CardType.RIBBON)) == 10
        assert len(cards_of_type(CardType.JUNK)) == 24

    def test_month_major_layout(self):
        for cid in FULL_DECK:
            assert card_month(cid) == cid // 4 + 1

    def test_unknown_id(self):
        with pytest.raises(KeyError):
            get_card(48)
        with pytest.raises(KeyError):
            get_card(-1)

    def test_lights(self):
        lights = [c.id for c in cards_of_type(CardType.LIGHT)]
        assert lights == [0, 8, 28, 40, 44]

    def test_rain_light(self):
        rain = [c.id for c in ALL_CARDS if c.is_rain_light]
        assert rain == [44]
        assert card_month(44) == 12

    def test_double_junk(self):
        doubles = [c.id for c in ALL_CARDS if c.is_double_junk]
        assert doubles == [42, 47]
        assert all(card_type(cid) == CardType.JUNK for cid in doubles)

    def test_ribbon_sets(self):
        def ids(kind):
            return [c.id for c in ALL_CARDS if c.ribbon_type == kind]

        assert ids(RibbonType.RED) == [1, 5, 9]
        assert ids(RibbonType.BLUE) == [21, 33, 37]
        assert ids(RibbonType.EARLY) == [13, 17, 25]
        assert get_card(46).card_type == CardType.RIBBON
        assert get_card(46).ribbon_type == RibbonType.NONE

    def test_birds(self):
        birds = [cid for cid in FULL_DECK if is_bird(cid)]
        assert birds == [4, 12, 29]

    def test_names(self):
        assert get_card(0).name.startswith("Pine")
        assert get_card(44).name == "Willow rain light"


class TestValues:
    """价值计算测试"""

    def test_junk_value(self):
        assert junk_value([2, 3]) == 2
        assert junk_value([42]) == 2
        assert junk_value([42, 47, 2]) == 5
        assert junk_value([]) == 0

    def test_card_value_order(self):
        assert card_value(0) > card_value(4) > card_value(1) > card_value(2)


class TestEncoding:
    """numpy 编码测试"""

    def test_cards_to_array(self):
        arr = cards_to_array([0, 5, 47])
        assert arr.shape == (48,)
        assert arr.dtype == np.float32
        assert arr.sum() == 3
        assert arr[5] == 1

    def test_empty(self):
        assert cards_to_array([]).sum() == 0
        assert month_counts([]).sum() == 0

    def test_month_counts(self):
        counts = month_counts([0, 1, 2, 44])
        assert counts.shape == (12,)
        assert counts[0] == 3
        assert counts[11] == 1
        assert counts.sum() == 4

    def test_cards_to_str(self):
        assert cards_to_str([0, 2]) == "1:light 1:junk"
