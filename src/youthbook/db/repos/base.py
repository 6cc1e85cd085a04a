from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import Select, delete, inspect, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from youthbook.db.keyset import fetch_page
from youthbook.db.models import Base, utcnow
from youthbook.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from youthbook.logging_config import log_with_fields
from youthbook.pagination import PageResult
from youthbook.settings import get_settings

ModelT = TypeVar("ModelT", bound=Base)

logger = logging.getLogger("youthbook.persistence")

_MANAGED_FIELDS = frozenset({"id", "version", "inserted_at", "updated_at"})


class BaseRepository(Generic[ModelT]):  # noqa: UP046
    def __init__(self, session: AsyncSession, model: type[ModelT]) -> None:
        self.session = session
        self.model = model

    async def get(self, id_: Any) -> ModelT | None:
        return await self.session.get(self.model, id_, populate_existing=True)

    async def get_many(self, ids: Iterable[uuid.UUID]) -> list[ModelT]:
        wanted = list(ids)
        if not wanted:
            return []
        result = await self.session.execute(
            select(self.model)
            .where(self.model.id.in_(wanted))  # type: ignore[attr-defined]
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())


@dataclass(frozen=True)
class VersionedChange:
    """One conditional write: apply ``changes`` if the row is still at ``expected_version``."""

    id: uuid.UUID
    expected_version: int
    changes: Mapping[str, Any] = field(default_factory=dict)


class VersionedRepository(BaseRepository[ModelT]):
    """Repository for models carrying ``VersionedMixin`` columns.

    All writes go through a single compare-and-swap statement on ``version``;
    nothing here holds a lock between a read and the write that depends on it,
    and nothing here retries.
    """

    # Column names of the uniqueness constraint used by ``upsert``.
    natural_key: ClassVar[tuple[str, ...]] = ()

    def validate_changes(self, changes: Mapping[str, Any], *, creating: bool) -> dict[str, str]:
        """Return field-level errors for ``changes``; empty when valid.

        Subclasses override this with the entity's domain constraints.
        """
        return {}

    def _checked(self, changes: Mapping[str, Any], *, creating: bool = False) -> dict[str, Any]:
        columns = inspect(self.model).columns
        errors: dict[str, str] = {}
        for name, value in changes.items():
            if name in _MANAGED_FIELDS:
                errors[name] = "is managed by the repository"
            elif name not in columns:
                errors[name] = "is not a known field"
            elif value is None and not columns[name].nullable:
                errors[name] = "can't be blank"
        if not errors:
            errors.update(self.validate_changes(changes, creating=creating))
        if errors:
            raise ValidationError(errors)
        return dict(changes)

    def _model_name(self) -> str:
        return self.model.__name__

    async def fetch_page(
        self,
        statement: Select[tuple[ModelT]] | None = None,
        *,
        limit: int | None,
        cursor: str | None,
    ) -> PageResult[ModelT]:
        stmt = statement if statement is not None else select(self.model)
        settings = get_settings()
        return await fetch_page(
            self.session,
            stmt,
            sort_column=self.model.inserted_at,  # type: ignore[attr-defined]
            id_column=self.model.id,  # type: ignore[attr-defined]
            limit=limit,
            cursor=cursor,
            default_limit=settings.default_page_size,
            max_limit=settings.max_page_size,
        )

    async def create(self, fields: Mapping[str, Any]) -> ModelT:
        values = self._checked(fields, creating=True)
        now = utcnow()
        obj = self.model(**values, version=1, inserted_at=now, updated_at=now)
        self.session.add(obj)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return obj

    async def _conditional_update(self, change: VersionedChange) -> ModelT:
        values = self._checked(change.changes)
        model: Any = self.model
        stmt = (
            update(model)
            .where(model.id == change.id, model.version == change.expected_version)
            .values(**values, version=model.version + 1, updated_at=utcnow())
            .returning(model)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        result = await self.session.execute(stmt)
        updated = result.scalars().one_or_none()
        if updated is not None:
            return updated  # type: ignore[no-any-return]

        raise await self._classify_miss(change.id, change.expected_version)

    async def _classify_miss(
        self,
        id_: uuid.UUID,
        expected_version: int,
        guard_errors: Mapping[str, str] | None = None,
    ) -> PersistenceError:
        # Zero rows matched. The write already lost; this only classifies why.
        model: Any = self.model
        current_version = await self.session.scalar(select(model.version).where(model.id == id_))
        if current_version is None:
            return NotFoundError(self._model_name(), {"id": id_})
        if current_version == expected_version and guard_errors is not None:
            return ValidationError(dict(guard_errors))
        return ConflictError(
            self._model_name(),
            {"id": id_},
            expected_version=expected_version,
            current_version=current_version,
        )

    async def update_versioned(
        self,
        id_: uuid.UUID,
        expected_version: int,
        changes: Mapping[str, Any],
    ) -> ModelT:
        """Write ``changes`` if the stored row is still at ``expected_version``.

        Returns the row at ``expected_version + 1``.

        Raises:
            ValidationError: ``changes`` violate a field constraint; nothing is written.
            NotFoundError: no row with ``id_`` exists.
            ConflictError: the row exists at a different version.
        """
        change = VersionedChange(id=id_, expected_version=expected_version, changes=changes)
        try:
            updated = await self._conditional_update(change)
        except PersistenceError as exc:
            await self.session.rollback()
            self._log_rejected(exc, change)
            raise
        except Exception:
            await self.session.rollback()
            raise
        await self.session.commit()

        log_with_fields(
            logger,
            logging.DEBUG,
            "versioned update applied",
            model=self._model_name(),
            record_id=id_,
            version=updated.version,  # type: ignore[attr-defined]
        )
        return updated

    async def update_entity(self, entity: ModelT, changes: Mapping[str, Any]) -> ModelT:
        return await self.update_versioned(
            entity.id,  # type: ignore[attr-defined]
            entity.version,  # type: ignore[attr-defined]
            changes,
        )

    async def delete_versioned(
        self,
        id_: uuid.UUID,
        expected_version: int,
        *,
        guard: ColumnElement[bool] | None = None,
        guard_errors: Mapping[str, str] | None = None,
    ) -> None:
        """Hard-delete the row if it is still at ``expected_version``.

        ``guard`` is an extra condition evaluated inside the same ``DELETE``.
        When it alone keeps the row, or a foreign key still references the
        row, ``guard_errors`` are raised as a ``ValidationError``.

        Raises:
            NotFoundError: no row with ``id_`` exists.
            ConflictError: the row exists at a different version.
            ValidationError: ``guard`` kept the row or it is still referenced.
        """
        model: Any = self.model
        stmt = delete(model).where(model.id == id_, model.version == expected_version)
        if guard is not None:
            stmt = stmt.where(guard)
        stmt = stmt.execution_options(synchronize_session=False)
        change = VersionedChange(id=id_, expected_version=expected_version)
        try:
            try:
                result = await self.session.execute(stmt)
            except IntegrityError as exc:
                if guard_errors is None:
                    raise
                raise ValidationError(dict(guard_errors)) from exc
            if result.rowcount != 1:  # type: ignore[attr-defined]
                raise await self._classify_miss(id_, expected_version, guard_errors)
        except PersistenceError as exc:
            await self.session.rollback()
            self._log_rejected(exc, change)
            raise
        except Exception:
            await self.session.rollback()
            raise
        await self.session.commit()

        log_with_fields(
            logger,
            logging.INFO,
            "versioned delete applied",
            model=self._model_name(),
            record_id=id_,
            version=expected_version,
        )

    async def upsert(
        self,
        natural_key: Mapping[str, Any],
        fields: Mapping[str, Any],
        *,
        conflict_where: ColumnElement[bool] | None = None,
        conflict_errors: Mapping[str, str] | None = None,
    ) -> ModelT:
        """Insert a row for ``natural_key`` or overwrite ``fields`` on the existing one.

        A fresh row starts at version 1; an existing row's version is bumped
        by one. Concurrent first writers never see a uniqueness violation:
        the store turns the losing insert into an update of the winner's row.
        ``conflict_where`` restricts which existing rows may be overwritten and
        is evaluated inside the same statement.

        Raises:
            ValueError: ``natural_key`` does not name this repository's key columns.
            ValidationError: ``fields`` violate a field constraint, or the
                existing row fails ``conflict_where`` (``conflict_errors``).
        """
        if not self.natural_key:
            raise ValueError(f"{self._model_name()} has no natural key")
        if set(natural_key) != set(self.natural_key):
            raise ValueError(f"natural_key must provide exactly {sorted(self.natural_key)}")
        overlap = set(natural_key) & set(fields)
        if overlap:
            raise ValueError(f"fields must not repeat natural key columns: {sorted(overlap)}")

        values = self._checked({**natural_key, **fields}, creating=True)
        now = utcnow()
        model: Any = self.model

        insert = self._dialect_insert()
        stmt = insert(model).values(
            **values, id=uuid.uuid4(), version=1, inserted_at=now, updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=list(self.natural_key),
            set_={
                **{name: stmt.excluded[name] for name in fields},
                "version": model.version + 1,
                "updated_at": now,
            },
            where=conflict_where,
        ).returning(model)

        try:
            result = await self.session.execute(
                stmt, execution_options={"populate_existing": True}
            )
            record = result.scalars().one_or_none()
            if record is None:
                # The existing row failed conflict_where and was left untouched.
                raise ValidationError(dict(conflict_errors or {"base": "cannot be overwritten"}))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        log_with_fields(
            logger,
            logging.DEBUG,
            "upsert applied",
            model=self._model_name(),
            record_id=record.id,
            version=record.version,
        )
        return record  # type: ignore[no-any-return]

    async def submit_batch(self, changes: Sequence[VersionedChange]) -> list[ModelT]:
        """Apply every conditional write in one transaction, or none of them.

        Results come back in input order, each at its expected version plus one.

        Raises:
            ValidationError, NotFoundError, ConflictError: from the first entry
                that fails, with ``batch_index`` and ``record_id`` set. Earlier
                writes of the same call are rolled back.
        """
        if not changes:
            return []

        updated: list[ModelT] = []
        for index, change in enumerate(changes):
            try:
                updated.append(await self._conditional_update(change))
            except PersistenceError as exc:
                await self.session.rollback()
                exc.at_batch_position(index, change.id)
                self._log_rejected(exc, change)
                raise
            except Exception:
                await self.session.rollback()
                raise

        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        log_with_fields(
            logger,
            logging.INFO,
            "batch committed",
            model=self._model_name(),
            count=len(updated),
        )
        return updated

    def _dialect_insert(self) -> Any:
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert
        if dialect == "sqlite":
            return sqlite.insert
        raise NotImplementedError(f"upsert is not supported on {dialect}")

    def _log_rejected(self, exc: PersistenceError, change: VersionedChange) -> None:
        level = logging.WARNING if isinstance(exc, ConflictError) else logging.INFO
        log_with_fields(
            logger,
            level,
            "versioned write rejected",
            model=self._model_name(),
            record_id=change.id,
            expected_version=change.expected_version,
            error=type(exc).__name__,
            batch_index=exc.batch_index,
        )
