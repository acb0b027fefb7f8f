"""月份匹配测试"""
import pytest

from core.exceptions import MatchContractError
from core.matching import MatchResolver, MatchResult, MatchType


class TestResolve:
    """resolve 测试"""

    def test_no_match(self):
        result = MatchResolver.resolve({2: [6]}, 0)
        assert result.match_type == MatchType.NO_MATCH
        assert result.targets == ()

    def test_single(self):
        result = MatchResolver.resolve({1: [2]}, 0)
        assert result.match_type == MatchType.SINGLE
        assert result.targets == (2,)

    def test_choice(self):
        result = MatchResolver.resolve({1: [2, 3]}, 0)
        assert result.match_type == MatchType.CHOICE
        assert result.needs_choice
        assert set(result.targets) == {2, 3}

    def test_quad(self):
        result = MatchResolver.resolve({1: [1, 2, 3]}, 0)
        assert result.match_type == MatchType.QUAD
        assert not result.needs_choice

    def test_other_month_ignored(self):
        result = MatchResolver.resolve({1: [1, 2, 3], 2: [5]}, 6)
        assert result.match_type == MatchType.SINGLE
        assert result.targets == (5,)


class TestExecute:
    """execute 测试"""

    def test_no_match_places_card(self):
        table = {2: [6]}
        result = MatchResolver.resolve(table, 0)
        new_table, captured = MatchResolver.execute(table, 0, result)
        assert captured == []
        assert new_table == {1: [0], 2: [6]}
        # 输入不被修改
        assert table == {2: [6]}

    def test_single_captures_two(self):
        table = {1: [2]}
        result = MatchResolver.resolve(table, 0)
        new_table, captured = MatchResolver.execute(table, 0, result)
        assert len(captured) == 2
        assert set(captured) == {0, 2}
        assert 1 not in new_table

    def test_choice_requires_target(self):
        table = {1: [2, 3]}
        result = MatchResolver.resolve(table, 0)
        with pytest.raises(MatchContractError):
            MatchResolver.execute(table, 0, result)

    def test_choice_rejects_unknown_target(self):
        table = {1: [2, 3]}
        result = MatchResolver.resolve(table, 0)
        with pytest.raises(MatchContractError):
            MatchResolver.execute(table, 0, result, target=1)

    def test_choice_captures_two(self):
        table = {1: [2, 3]}
        result = MatchResolver.resolve(table, 0)
        new_table, captured = MatchResolver.execute(table, 0, result, target=3)
        assert captured == [0, 3]
        assert new_table == {1: [2]}

    def test_quad_captures_four(self):
        table = {1: [1, 2, 3], 5: [16]}
        result = MatchResolver.resolve(table, 0)
        new_table, captured = MatchResolver.execute(table, 0, result)
        assert len(captured) == 4
        assert set(captured) == {0, 1, 2, 3}
        assert new_table == {5: [16]}

    def test_execute_with_explicit_result(self):
        result = MatchResult(MatchType.CHOICE, (2, 3))
        _, captured = MatchResolver.execute({1: [2, 3]}, 0, result, target=2)
        assert captured == [0, 2]


class TestBombOptions:
    """炸弹判定测试"""

    def test_three_of_month_with_table(self):
        assert MatchResolver.bomb_options([0, 1, 2, 20], {1: [3]}) == [1]

    def test_two_of_month_never(self):
        assert MatchResolver.bomb_options([0, 1, 20], {1: [3]}) == []

    def test_requires_table_card(self):
        assert MatchResolver.bomb_options([0, 1, 2], {2: [4]}) == []

    def test_multiple_months(self):
        hand = [0, 1, 2, 4, 5, 6]
        table = {1: [3], 2: [7]}
        assert MatchResolver.bomb_options(hand, table) == [1, 2]


class TestStackedMonths:
    """叠牌查询测试"""

    def test_stacked(self):
        table = {1: [0, 1, 2], 2: [4, 5], 12: [44, 45, 46]}
        assert MatchResolver.stacked_months(table) == [1, 12]

    def test_none(self):
        assert MatchResolver.stacked_months({3: [8]}) == []

    def test_only_exact_triples(self):
        assert MatchResolver.stacked_months({1: [0, 1, 2, 3], 2: [4, 5, 6]}) == [2]
