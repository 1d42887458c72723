"""
Unit-тесты для UnitOfWork.

Проверяют:
- Создание и закрытие сессии
- Commit при нормальном выходе
- Rollback при ошибках
- Доступ к сессии вне контекста
"""

import pytest
from unittest.mock import AsyncMock, Mock
from sqlalchemy.ext.asyncio import AsyncSession

from policy_service.infrastructure.persistence.repositories import PolicyRepository
from policy_service.infrastructure.persistence.unit_of_work import UnitOfWork


def make_factory():
    session = AsyncMock(spec=AsyncSession)
    return Mock(return_value=session), session


class TestUnitOfWorkContextManager:
    """Тесты контекстного менеджера."""

    @pytest.mark.asyncio
    async def test_enter_creates_session_and_repositories(self):
        factory, session = make_factory()

        async with UnitOfWork(factory, operation="test") as uow:
            factory.assert_called_once()
            assert uow.session is session
            assert isinstance(uow.policies, PolicyRepository)

    @pytest.mark.asyncio
    async def test_exit_commits_and_closes(self):
        factory, session = make_factory()

        async with UnitOfWork(factory):
            pass

        session.commit.assert_called_once()
        session.rollback.assert_not_called()
        session.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_exit_rollback_on_exception(self):
        factory, session = make_factory()

        with pytest.raises(ValueError):
            async with UnitOfWork(factory):
                raise ValueError("Test error")

        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_repositories_released_after_exit(self):
        factory, _ = make_factory()
        uow = UnitOfWork(factory)

        async with uow:
            pass

        assert uow.policies is None
        assert uow.translations is None

    @pytest.mark.asyncio
    async def test_commit_failure_propagates_and_closes(self):
        factory, session = make_factory()
        session.commit.side_effect = RuntimeError("disk full")

        with pytest.raises(RuntimeError, match="disk full"):
            async with UnitOfWork(factory, operation="publish"):
                pass

        session.close.assert_called_once()


class TestUnitOfWorkOutsideContext:
    """Операции вне контекста запрещены."""

    def test_session_property_outside_context_raises_error(self):
        uow = UnitOfWork(Mock())

        with pytest.raises(RuntimeError, match="not in context"):
            _ = uow.session

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["commit", "flush", "rollback"])
    async def test_methods_outside_context_raise_error(self, method):
        uow = UnitOfWork(Mock())

        with pytest.raises(RuntimeError, match="not in context"):
            await getattr(uow, method)()
