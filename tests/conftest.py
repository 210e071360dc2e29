import sys
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

# Ensure the package is importable without installation when running tests locally
pkg_src = Path(__file__).resolve().parents[1] / "src"
if str(pkg_src) not in sys.path:
    sys.path.insert(0, str(pkg_src))

from lottery_yield_lab.core import Draw  # noqa: E402

NOW = pd.Timestamp("2026-01-01T12:00:00Z")


@pytest.fixture
def now() -> pd.Timestamp:
    return NOW


@pytest.fixture
def draw_factory() -> Callable[..., Draw]:
    """Build draws dated ``weeks_ago`` weeks before :data:`NOW`."""

    def _make(
        draw_number: int,
        *,
        weeks_ago: float = 1.0,
        pool: float = 1_000_000.0,
        ngr: float = 700_000.0,
        tickets: int = 1_000_000,
        **kwargs: object,
    ) -> Draw:
        return Draw(
            draw_number=draw_number,
            date=NOW - pd.Timedelta(weeks=weeks_ago),
            total_pool_usd=pool,
            ngr_usd=ngr,
            total_tickets=tickets,
            **kwargs,  # type: ignore[arg-type]
        )

    return _make
