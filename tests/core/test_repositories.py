import pandas as pd
import pytest

from lottery_yield_lab.core import Draw, DrawRepository


@pytest.fixture
def repository(draw_factory) -> DrawRepository:
    return DrawRepository(
        [
            draw_factory(60, weeks_ago=3),
            draw_factory(62, weeks_ago=1),
            draw_factory(63, weeks_ago=-0.5),
            draw_factory(61, weeks_ago=2),
        ]
    )


def test_draws_are_kept_newest_first(repository: DrawRepository) -> None:
    assert [d.draw_number for d in repository] == [63, 62, 61, 60]
    assert repository[0].draw_number == 63
    assert len(repository) == 4


def test_duplicate_draw_numbers_are_replaced(repository: DrawRepository, draw_factory) -> None:
    repository.add(draw_factory(61, weeks_ago=2, ngr=1.0))
    assert len(repository) == 4
    replaced = repository.get(61)
    assert replaced is not None
    assert replaced.ngr_usd == 1.0


def test_completed_excludes_future_draws(repository: DrawRepository, now: pd.Timestamp) -> None:
    completed = repository.completed(now)
    assert [d.draw_number for d in completed] == [62, 61, 60]
    assert repository.latest() is not None
    assert repository.latest().draw_number == 63
    assert completed.latest().draw_number == 62


def test_completed_on_exact_draw_time_is_pending(draw_factory, now: pd.Timestamp) -> None:
    repo = DrawRepository([draw_factory(1, weeks_ago=0)])
    assert len(repo.completed(now)) == 0


def test_completed_reads_naive_dates_as_utc(draw_factory, now: pd.Timestamp) -> None:
    naive = Draw(
        draw_number=5,
        date=pd.Timestamp("2026-01-01 11:00"),
        total_pool_usd=1.0,
        ngr_usd=1.0,
        total_tickets=1,
    )
    pending = Draw(
        draw_number=6,
        date=pd.Timestamp("2026-01-01 13:00"),
        total_pool_usd=1.0,
        ngr_usd=1.0,
        total_tickets=1,
    )
    repo = DrawRepository([naive, pending, draw_factory(4)])

    assert [d.draw_number for d in repo.completed(now)] == [5, 4]
    assert [d.draw_number for d in repo.completed(pd.Timestamp("2026-01-01 12:00"))] == [5, 4]


def test_get_unknown_draw_returns_none(repository: DrawRepository) -> None:
    assert repository.get(999) is None


def test_to_dataframe_includes_effective_ngr(repository: DrawRepository, now: pd.Timestamp) -> None:
    adjusted = Draw(
        draw_number=70,
        date=now,
        total_pool_usd=1.0,
        ngr_usd=100.0,
        total_tickets=1,
        adjusted_ngr_usd=80.0,
    )
    repository.add(adjusted)
    df = repository.to_dataframe()
    assert list(df["draw_number"]) == [70, 63, 62, 61, 60]
    assert df.loc[0, "effective_ngr"] == 80.0
    assert df.loc[1, "effective_ngr"] == 700_000.0


def test_empty_repository() -> None:
    repo = DrawRepository()
    assert repo.latest() is None
    assert repo.to_dataframe().empty
    assert list(repo) == []
