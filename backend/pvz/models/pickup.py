from __future__ import annotations

from ..extensions import db


class PickupPointRow(db.Model):
    """
    Pickup point (PVZ).

    Immutable once created: there is no update or delete path.
    """
    __tablename__ = "pvz"

    id = db.Column(db.String(36), primary_key=True)
    city = db.Column(db.String(64), nullable=False)
    registration_date = db.Column(db.DateTime, nullable=False, index=True)

    receptions = db.relationship("ReceptionRow", backref="pickup_point", lazy=True)

    def __repr__(self) -> str:
        return f"<PickupPointRow id={self.id} city={self.city!r}>"


class ReceptionRow(db.Model):
    """
    Reception (intake batch) at a pickup point.

    INVARIANT: at most one in_progress reception per pvz_id. The partial
    unique index enforces it at the storage level; the service layer also
    serializes opens per pickup point.
    """
    __tablename__ = "receptions"
    __table_args__ = (
        db.Index(
            "ux_receptions_one_active_per_pvz",
            "pvz_id",
            unique=True,
            sqlite_where=db.text("status = 'in_progress'"),
            postgresql_where=db.text("status = 'in_progress'"),
        ),
        db.Index("ix_receptions_pvz_status", "pvz_id", "status"),
    )

    id = db.Column(db.String(36), primary_key=True)
    pvz_id = db.Column(db.String(36), db.ForeignKey("pvz.id"), nullable=False, index=True)
    date_time = db.Column(db.DateTime, nullable=False)

    # in_progress | closed
    status = db.Column(db.String(16), nullable=False, default="in_progress")

    products = db.relationship("ProductRow", backref="reception", lazy=True)

    def __repr__(self) -> str:
        return f"<ReceptionRow id={self.id} pvz_id={self.pvz_id} status={self.status}>"


class ProductRow(db.Model):
    """
    Product logged in a reception.

    seq is the surrogate autoincrement key; it breaks ties between products
    that share a date_time so "last product" is deterministic.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_reception_order", "reception_id", "date_time", "seq"),
        {"sqlite_autoincrement": True},
    )

    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(36), nullable=False, unique=True)
    date_time = db.Column(db.DateTime, nullable=False)
    type = db.Column(db.String(32), nullable=False)
    reception_id = db.Column(db.String(36), db.ForeignKey("receptions.id"), nullable=False)

    def __repr__(self) -> str:
        return f"<ProductRow id={self.id} seq={self.seq} type={self.type}>"
