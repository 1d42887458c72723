"""
Unit of Work для управления транзакциями операций над политиками.

Одна операция сервиса (создание, публикация, перевод) выполняется в одном
UnitOfWork: все изменения фиксируются вместе или откатываются вместе.
"""

import logging
import time
from typing import Callable, Optional

from prometheus_client import Counter, Histogram
from sqlalchemy.ext.asyncio import AsyncSession

from .repositories import (
    PolicyRepository,
    TranslationRepository,
    WorkflowRepository,
    AuditLogRepository,
    PolicyCaseAssociationRepository,
)

logger = logging.getLogger("policy-service.infrastructure.unit_of_work")

transaction_duration = Histogram(
    "policy_service_transaction_duration_seconds",
    "Duration of unit of work commits",
    ["operation"]
)

transaction_commits = Counter(
    "policy_service_transaction_commits_total",
    "Total number of unit of work commits",
    ["operation", "status"]
)

_NOT_IN_CONTEXT = "UnitOfWork is not in context. Use 'async with UnitOfWork(...) as uow:'"


class UnitOfWork:
    """
    Unit of Work (Martin Fowler): сессия БД + репозитории + граница транзакции.

    Особенности:
    - Создает и закрывает сессию БД
    - Предоставляет репозитории с единой сессией
    - Commit при нормальном выходе, rollback при исключении
    - Метрики длительности и количества commit'ов

    Использование:
        >>> async with UnitOfWork(session_factory, operation="publish") as uow:
        ...     policy = await uow.policies.get(policy_id, org_id)
        ...     policy.status = "PUBLISHED"

    Атрибуты:
        policies: PolicyRepository
        translations: TranslationRepository
        workflows: WorkflowRepository
        audit_logs: AuditLogRepository
        case_links: PolicyCaseAssociationRepository
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        operation: str = "unknown"
    ):
        """
        Args:
            session_factory: Callable для создания AsyncSession
            operation: Название операции для метрик и логирования
        """
        self._session_factory = session_factory
        self._operation = operation
        self._session: Optional[AsyncSession] = None

        self.policies: Optional[PolicyRepository] = None
        self.translations: Optional[TranslationRepository] = None
        self.workflows: Optional[WorkflowRepository] = None
        self.audit_logs: Optional[AuditLogRepository] = None
        self.case_links: Optional[PolicyCaseAssociationRepository] = None

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        logger.debug(f"UnitOfWork[{self._operation}]: New session created")

        self.policies = PolicyRepository(self._session)
        self.translations = TranslationRepository(self._session)
        self.workflows = WorkflowRepository(self._session)
        self.audit_logs = AuditLogRepository(self._session)
        self.case_links = PolicyCaseAssociationRepository(self._session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """
        Выход из контекста.

        При ошибке выполняется rollback, иначе commit; сессия закрывается
        в любом случае.
        """
        if self._session is None:
            return

        try:
            if exc_type is not None:
                logger.warning(
                    f"UnitOfWork[{self._operation}]: Exception occurred "
                    f"({exc_type.__name__}), rolling back transaction"
                )
                await self._session.rollback()
            else:
                await self.commit()
        finally:
            await self._session.close()
            self._session = None

            self.policies = None
            self.translations = None
            self.workflows = None
            self.audit_logs = None
            self.case_links = None

    @property
    def session(self) -> AsyncSession:
        """
        Текущая сессия БД.

        Raises:
            RuntimeError: Если UoW не находится в контексте
        """
        if self._session is None:
            raise RuntimeError(_NOT_IN_CONTEXT)
        return self._session

    async def commit(self, operation: Optional[str] = None):
        """
        Явный commit текущей транзакции с метриками.

        Raises:
            RuntimeError: Если UoW не находится в контексте
        """
        if self._session is None:
            raise RuntimeError(_NOT_IN_CONTEXT)

        operation = operation or self._operation
        start_time = time.time()
        try:
            await self._session.commit()
        except Exception as e:
            transaction_commits.labels(operation=operation, status="error").inc()
            logger.error(
                f"UnitOfWork: Commit failed (operation={operation}): {e}",
                exc_info=True
            )
            raise

        duration = time.time() - start_time
        transaction_duration.labels(operation=operation).observe(duration)
        transaction_commits.labels(operation=operation, status="success").inc()
        logger.debug(
            f"UnitOfWork: Transaction committed "
            f"(operation={operation}, duration={duration:.3f}s)"
        )

    async def flush(self):
        """
        Flush без commit.

        Raises:
            RuntimeError: Если UoW не находится в контексте
        """
        if self._session is None:
            raise RuntimeError(_NOT_IN_CONTEXT)
        await self._session.flush()

    async def rollback(self):
        """
        Явный rollback текущей транзакции.

        Raises:
            RuntimeError: Если UoW не находится в контексте
        """
        if self._session is None:
            raise RuntimeError(_NOT_IN_CONTEXT)
        await self._session.rollback()
        logger.debug(f"UnitOfWork[{self._operation}]: Transaction rolled back")
