# Overview: Service-layer operations for receptions; owns the open/close state machine.

"""
Reception Lifecycle Service

STATE MACHINE:
    in_progress -> closed

    in_progress: products may be added and removed (LIFO)
    closed:      TERMINAL, no reopening; a new reception must be opened

RULES:
1. At most one in_progress reception per pickup point at any time
2. Closing requires an in_progress reception; closing twice fails
3. Opening after a close creates a new reception with a new id

CONCURRENCY:
Open and close are check-then-act sequences across two store calls. Both
run under the per-pickup-point KeyedLock shared with ProductService, so
concurrent requests for the same pickup point are serialized in-process.
Different pickup points never contend. The SQL store additionally rejects
a second in_progress reception through a partial unique index.

Each store call receives what is left of the caller's deadline so a slow
statement cannot hold the pickup point past it.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from pvz.domain import STATUS_CLOSED, STATUS_IN_PROGRESS, Reception
from pvz.errors import ActiveReceptionExistsError, NoActiveReceptionError
from pvz.services.concurrency import Deadline, KeyedLock
from pvz.stores.base import PickupPointStore, ReceptionStore
from pvz.time_utils import utcnow

logger = logging.getLogger(__name__)


class ReceptionService:
    def __init__(
        self,
        receptions: ReceptionStore,
        pickup_points: PickupPointStore,
        locks: KeyedLock | None = None,
        default_timeout: float | None = None,
    ):
        self.receptions = receptions
        self.pickup_points = pickup_points
        self.locks = locks if locks is not None else KeyedLock()
        self.default_timeout = default_timeout

    def _deadline(self, timeout: float | None) -> Deadline:
        return Deadline(self.default_timeout if timeout is None else timeout)

    def _find_active(self, pvz_id: str, deadline: Deadline) -> Reception | None:
        try:
            return self.receptions.get_active(pvz_id, for_update=True, timeout=deadline.remaining())
        except NoActiveReceptionError:
            return None

    def open_reception(
        self,
        pvz_id: str,
        *,
        reception_id: str | None = None,
        date_time: datetime | None = None,
        timeout: float | None = None,
    ) -> Reception:
        """
        Open a new reception for a pickup point.

        Raises:
            PickupPointNotFoundError: pvz_id does not exist
            ActiveReceptionExistsError: an in_progress reception already exists
            StoreTimeoutError: the deadline expired
        """
        deadline = self._deadline(timeout)
        with self.locks.hold(pvz_id, deadline):
            deadline.check("pickup point lookup")
            self.pickup_points.get(pvz_id, timeout=deadline.remaining())

            deadline.check("active reception lookup")
            if self._find_active(pvz_id, deadline) is not None:
                raise ActiveReceptionExistsError(pvz_id)

            reception = Reception(
                id=reception_id or str(uuid.uuid4()),
                pvz_id=pvz_id,
                date_time=date_time or utcnow(),
                status=STATUS_IN_PROGRESS,
            )

            deadline.check("reception insert")
            self.receptions.create(reception, timeout=deadline.remaining())

        logger.info("Opened reception %s for pvz %s", reception.id, pvz_id)
        return reception

    def close_reception(self, pvz_id: str, *, timeout: float | None = None) -> Reception:
        """
        Close the in_progress reception of a pickup point.

        The returned reception always reports status closed.

        Raises:
            NoActiveReceptionError: nothing to close
            StoreError: the store updated zero rows
        """
        deadline = self._deadline(timeout)
        with self.locks.hold(pvz_id, deadline):
            deadline.check("active reception lookup")
            reception = self._find_active(pvz_id, deadline)
            if reception is None:
                raise NoActiveReceptionError(pvz_id)

            deadline.check("reception close")
            self.receptions.close(reception.id, timeout=deadline.remaining())

        reception.status = STATUS_CLOSED
        logger.info("Closed reception %s for pvz %s", reception.id, pvz_id)
        return reception

    def get_active_reception(self, pvz_id: str) -> Reception:
        """Raises NoActiveReceptionError when the pickup point has no open reception."""
        return self.receptions.get_active(pvz_id)

    def get_reception(self, reception_id: str) -> Reception:
        return self.receptions.get(reception_id)

    def list_receptions(self, pvz_id: str) -> list[Reception]:
        return self.receptions.list_for_pvz(pvz_id)
