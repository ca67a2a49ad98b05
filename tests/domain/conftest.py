from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.helpers.stack import Stack

if TYPE_CHECKING:
    from collections.abc import Callable

    from episync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def stack(sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> Stack:
    return Stack(uow=sqlite_unit_of_work)
