"""
Test: Age Filter Resolver
=========================

Criteria validation in the resolver, predicate shaping in the repository.
"""

import pytest

from repositories.calibration_repository import CalibrationRepository
from services.age_filter import AgeFilterResolver
from services.errors import InvalidCriteria

from tests.conftest import FakePool


@pytest.fixture
def resolver(calibration_repo):
    return AgeFilterResolver(calibration_repo)


class TestAgeRangeResolver:
    """resolve_by_age_range()"""

    @pytest.mark.asyncio
    async def test_requires_a_bound(self, resolver, calibration_repo):
        """No bounds -> InvalidCriteria, no store call."""
        with pytest.raises(InvalidCriteria):
            await resolver.resolve_by_age_range(None, None)
        assert calibration_repo.calls == []

    @pytest.mark.asyncio
    async def test_min_only(self, resolver, calibration_repo):
        """Min bound alone is enough."""
        calibration_repo.age_ids = [4, 5]
        ids = await resolver.resolve_by_age_range(min_age=10)
        assert ids == [4, 5]
        assert calibration_repo.args('find_ids_by_age_range') == [(10, None)]

    @pytest.mark.asyncio
    async def test_zero_is_a_bound(self, resolver, calibration_repo):
        """minAge=0 is a real bound, not 'absent'."""
        await resolver.resolve_by_age_range(min_age=0)
        assert calibration_repo.args('find_ids_by_age_range') == [(0, None)]


class TestEraResolver:
    """resolve_by_era()"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["", None])
    async def test_requires_path(self, resolver, calibration_repo, path):
        with pytest.raises(InvalidCriteria):
            await resolver.resolve_by_era(path)
        assert calibration_repo.calls == []

    @pytest.mark.asyncio
    async def test_passes_path_through(self, resolver, calibration_repo):
        calibration_repo.era_ids = [1, 2]
        assert await resolver.resolve_by_era("Neogene,Miocene") == [1, 2]
        assert calibration_repo.args('find_ids_by_geological_time') == [("Neogene,Miocene",)]


class TestAgeRangeQuery:
    """SQL produced by CalibrationRepository.find_ids_by_age_range()"""

    @pytest.mark.asyncio
    async def test_min_clause_keeps_zero_sentinel(self):
        """A stored 0 (unknown) age always satisfies the bound."""
        pool = FakePool(results=[[{'calibration_id': 1}, {'calibration_id': 2}]])
        repo = CalibrationRepository(pool)

        ids = await repo.find_ids_by_age_range(min_age=10)

        assert ids == [1, 2]
        _, query, args = pool.queries[0]
        assert "(min_age >= $1 OR min_age = 0)" in query
        assert "(max_age >= $1 OR max_age = 0)" in query
        assert "<=" not in query
        assert args == (10,)

    @pytest.mark.asyncio
    async def test_both_bounds_are_anded(self):
        pool = FakePool(results=[[]])
        repo = CalibrationRepository(pool)

        await repo.find_ids_by_age_range(min_age=5, max_age=20)

        _, query, args = pool.queries[0]
        assert "(min_age >= $1 OR min_age = 0) AND (max_age >= $1 OR max_age = 0) AND " \
               "(min_age <= $2 OR min_age = 0) AND (max_age <= $2 OR max_age = 0)" in query
        assert args == (5, 20)

    @pytest.mark.asyncio
    async def test_max_only_uses_first_placeholder(self):
        pool = FakePool(results=[[]])
        repo = CalibrationRepository(pool)

        await repo.find_ids_by_age_range(max_age=66)

        _, query, args = pool.queries[0]
        assert "(min_age <= $1 OR min_age = 0)" in query
        assert args == (66,)

    @pytest.mark.asyncio
    async def test_no_bounds_is_a_programming_error(self):
        repo = CalibrationRepository(FakePool())
        with pytest.raises(ValueError):
            await repo.find_ids_by_age_range()


class TestGeologicalTimeQuery:
    """SQL produced by CalibrationRepository.find_ids_by_geological_time()"""

    @pytest.mark.asyncio
    async def test_prefix_match_is_parameterized(self):
        """'C' is bound as a parameter and matched as a literal prefix."""
        pool = FakePool(results=[[{'calibration_id': 3}]])
        repo = CalibrationRepository(pool)

        ids = await repo.find_ids_by_geological_time("C")

        assert ids == [3]
        _, query, args = pool.queries[0]
        assert "starts_with(concat_ws(',', g.period, g.epoch, g.age), $1)" in query
        assert args == ("C",)
        assert "'C'" not in query
