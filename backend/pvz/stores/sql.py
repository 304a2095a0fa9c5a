# Overview: Flask-SQLAlchemy implementations of the store ports.

"""
SQL Stores

Every method runs inside _guard(): on any exception the session is rolled
back before the error propagates, so a failed insert/update never leaves
partial state in the session or the database.

TRANSLATION:
- "no rows" lookups -> the specific DomainError
- OperationalError (locked database, lost connection) -> StoreUnavailableError
- a statement that outlives the caller's timeout -> StoreTimeoutError
- IntegrityError on receptions -> ActiveReceptionExistsError when the
  partial unique index rejected a second in_progress reception
- IntegrityError on users -> EmailExistsError when the email is taken
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from ..extensions import db
from ..models import PickupPointRow, ProductRow, ReceptionRow, SessionTokenRow, UserRow
from pvz.domain import (
    STATUS_CLOSED,
    STATUS_IN_PROGRESS,
    PickupPoint,
    Product,
    Reception,
    Session,
    User,
)
from pvz.errors import (
    ActiveReceptionExistsError,
    EmailExistsError,
    NoActiveReceptionError,
    PickupPointNotFoundError,
    ProductDeleteConflictError,
    ProductNotFoundError,
    ReceptionNotFoundError,
    StoreError,
    StoreTimeoutError,
    StoreUnavailableError,
    UserNotFoundError,
)
from pvz.services.concurrency import lock_for_update


def _apply_timeout(session, timeout: float) -> None:
    """
    Bound the statements of the current transaction by timeout seconds.

    PostgreSQL cancels the statement; SQLite stops waiting on a locked
    database. Other dialects rely on the service-level deadline checks.
    """
    ms = max(1, int(timeout * 1000))
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        session.execute(text(f"SET LOCAL statement_timeout = {ms}"))
    elif dialect == "sqlite":
        session.execute(text(f"PRAGMA busy_timeout = {ms}"))


def _is_timeout(exc: OperationalError) -> bool:
    # 57014: query_canceled
    if getattr(exc.orig, "pgcode", None) == "57014":
        return True
    return "database is locked" in str(exc.orig)


@contextmanager
def _guard(*, commit: bool = False, timeout: Optional[float] = None):
    try:
        if timeout is not None:
            if timeout <= 0:
                raise StoreTimeoutError("deadline exceeded before the statement ran")
            _apply_timeout(db.session, timeout)
        yield db.session
        if commit:
            db.session.commit()
    except OperationalError as exc:
        db.session.rollback()
        if timeout is not None and _is_timeout(exc):
            raise StoreTimeoutError(str(exc.orig or exc)) from exc
        raise StoreUnavailableError(str(exc.orig or exc)) from exc
    except Exception:
        db.session.rollback()
        raise


def _user_from_row(row: UserRow) -> User:
    return User(id=row.id, email=row.email, role=row.role, password_hash=row.password_hash)


def _pvz_from_row(row: PickupPointRow) -> PickupPoint:
    return PickupPoint(id=row.id, city=row.city, registration_date=row.registration_date)


def _reception_from_row(row: ReceptionRow) -> Reception:
    return Reception(id=row.id, pvz_id=row.pvz_id, date_time=row.date_time, status=row.status)


def _product_from_row(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        date_time=row.date_time,
        type=row.type,
        reception_id=row.reception_id,
        seq=row.seq,
    )


class SqlUserStore:
    def create_user(self, user: User) -> None:
        try:
            with _guard(commit=True) as session:
                session.add(UserRow(
                    id=user.id,
                    email=user.email,
                    role=user.role,
                    password_hash=user.password_hash,
                ))
        except IntegrityError as exc:
            exists = db.session.query(UserRow.id).filter_by(email=user.email).first()
            if exists:
                raise EmailExistsError() from exc
            raise StoreError("user insert rejected") from exc

    def get_user_by_email(self, email: str) -> User:
        with _guard() as session:
            row = session.query(UserRow).filter_by(email=email).first()
        if not row:
            raise UserNotFoundError()
        return _user_from_row(row)

    def get_user(self, user_id: str) -> User:
        with _guard() as session:
            row = session.query(UserRow).filter_by(id=user_id).first()
        if not row:
            raise UserNotFoundError()
        return _user_from_row(row)


class SqlPickupPointStore:
    def create(self, pvz: PickupPoint) -> None:
        with _guard(commit=True) as session:
            session.add(PickupPointRow(
                id=pvz.id,
                city=pvz.city,
                registration_date=pvz.registration_date,
            ))

    def get(self, pvz_id: str, *, timeout: Optional[float] = None) -> PickupPoint:
        with _guard(timeout=timeout) as session:
            row = session.query(PickupPointRow).filter_by(id=pvz_id).first()
        if not row:
            raise PickupPointNotFoundError(pvz_id)
        return _pvz_from_row(row)

    def list(
        self,
        limit: int,
        offset: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[PickupPoint]:
        with _guard() as session:
            query = session.query(PickupPointRow)
            if start_date is not None:
                query = query.filter(PickupPointRow.registration_date >= start_date)
            if end_date is not None:
                query = query.filter(PickupPointRow.registration_date <= end_date)
            rows = (
                query.order_by(PickupPointRow.registration_date.asc(), PickupPointRow.id.asc())
                .limit(limit)
                .offset(offset)
                .all()
            )
        return [_pvz_from_row(r) for r in rows]


class SqlReceptionStore:
    def create(self, reception: Reception, *, timeout: Optional[float] = None) -> None:
        try:
            with _guard(commit=True, timeout=timeout) as session:
                session.add(ReceptionRow(
                    id=reception.id,
                    pvz_id=reception.pvz_id,
                    date_time=reception.date_time,
                    status=reception.status,
                ))
        except IntegrityError as exc:
            active = (
                db.session.query(ReceptionRow.id)
                .filter_by(pvz_id=reception.pvz_id, status=STATUS_IN_PROGRESS)
                .first()
            )
            if active:
                raise ActiveReceptionExistsError(reception.pvz_id) from exc
            raise StoreError("reception insert rejected") from exc

    def get_active(
        self,
        pvz_id: str,
        *,
        for_update: bool = False,
        timeout: Optional[float] = None,
    ) -> Reception:
        with _guard(timeout=timeout) as session:
            query = (
                session.query(ReceptionRow)
                .filter_by(pvz_id=pvz_id, status=STATUS_IN_PROGRESS)
                .order_by(ReceptionRow.date_time.desc())
            )
            if for_update:
                query = lock_for_update(query)
            row = query.first()
        if not row:
            raise NoActiveReceptionError(pvz_id)
        return _reception_from_row(row)

    def close(self, reception_id: str, *, timeout: Optional[float] = None) -> None:
        with _guard(commit=True, timeout=timeout) as session:
            updated = (
                session.query(ReceptionRow)
                .filter_by(id=reception_id, status=STATUS_IN_PROGRESS)
                .update({"status": STATUS_CLOSED}, synchronize_session=False)
            )
            if updated == 0:
                raise StoreError("no reception updated")

    def get(self, reception_id: str) -> Reception:
        with _guard() as session:
            row = session.query(ReceptionRow).filter_by(id=reception_id).first()
        if not row:
            raise ReceptionNotFoundError(reception_id)
        return _reception_from_row(row)

    def list_for_pvz(self, pvz_id: str) -> list[Reception]:
        with _guard() as session:
            rows = (
                session.query(ReceptionRow)
                .filter_by(pvz_id=pvz_id)
                .order_by(ReceptionRow.date_time.desc())
                .all()
            )
        return [_reception_from_row(r) for r in rows]


class SqlProductStore:
    def add(self, product: Product, *, timeout: Optional[float] = None) -> None:
        with _guard(commit=True, timeout=timeout) as session:
            row = ProductRow(
                id=product.id,
                date_time=product.date_time,
                type=product.type,
                reception_id=product.reception_id,
            )
            session.add(row)
            session.flush()
            product.seq = row.seq

    def get_last(self, reception_id: str, *, timeout: Optional[float] = None) -> Product:
        with _guard(timeout=timeout) as session:
            row = (
                session.query(ProductRow)
                .filter_by(reception_id=reception_id)
                .order_by(ProductRow.date_time.desc(), ProductRow.seq.desc())
                .first()
            )
        if not row:
            raise ProductNotFoundError(reception_id)
        return _product_from_row(row)

    def delete(self, product_id: str, *, timeout: Optional[float] = None) -> None:
        with _guard(commit=True, timeout=timeout) as session:
            deleted = (
                session.query(ProductRow)
                .filter_by(id=product_id)
                .delete(synchronize_session=False)
            )
            if deleted == 0:
                raise ProductDeleteConflictError(product_id)

    def list_for_reception(self, reception_id: str) -> list[Product]:
        with _guard() as session:
            rows = (
                session.query(ProductRow)
                .filter_by(reception_id=reception_id)
                .order_by(ProductRow.seq.asc())
                .all()
            )
        return [_product_from_row(r) for r in rows]


class SqlSessionStore:
    def create(self, session_record: Session) -> None:
        with _guard(commit=True) as session:
            session.add(SessionTokenRow(
                token_hash=session_record.token_hash,
                user_id=session_record.user_id,
                role=session_record.role,
                created_at=session_record.created_at,
                expires_at=session_record.expires_at,
            ))

    def get_by_hash(self, token_hash: str) -> Optional[Session]:
        with _guard() as session:
            row = session.query(SessionTokenRow).filter_by(token_hash=token_hash).first()
            if not row:
                return None
            return Session(
                token_hash=row.token_hash,
                role=row.role,
                created_at=row.created_at,
                expires_at=row.expires_at,
                user_id=row.user_id,
                email=row.user.email if row.user else None,
                revoked_at=row.revoked_at,
            )

    def revoke(self, token_hash: str, revoked_at: datetime) -> bool:
        with _guard(commit=True) as session:
            updated = (
                session.query(SessionTokenRow)
                .filter(
                    SessionTokenRow.token_hash == token_hash,
                    SessionTokenRow.revoked_at.is_(None),
                )
                .update({"revoked_at": revoked_at}, synchronize_session=False)
            )
        return updated > 0
