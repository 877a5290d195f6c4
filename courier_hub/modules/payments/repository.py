# courier_hub/modules/payments/repository.py
import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from courier_hub.core.errors import Conflict
from courier_hub.shared.database.models import Parcel, Payment
from courier_hub.shared.pagination import PageParams, paginate

logger = logging.getLogger(__name__)


class PaymentRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_payments(
        self, params: PageParams, user_email: Optional[str] = None
    ) -> Tuple[List[Payment], Dict[str, int]]:
        query = self.db.query(Payment)
        if user_email:
            query = query.filter(Payment.user_email == user_email)
        return paginate(query.order_by(Payment.created_at.desc(), Payment.id.desc()), params)

    def record(self, payment: Payment) -> Payment:
        """Flip the parcel to paid, then insert the payment row, in one transaction.

        The flip is conditional on the parcel still being unpaid, so two
        confirmations for the same parcel cannot both be recorded.
        """
        try:
            flipped = (
                self.db.query(Parcel)
                .filter(Parcel.id == payment.parcel_id, Parcel.payment_status == "unpaid")
                .update({"payment_status": "paid", "updated_at": datetime.now()}, synchronize_session=False)
            )
            if flipped == 0:
                self.db.rollback()
                raise Conflict("Parcel is already paid")

            self.db.add(payment)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Duplicate transaction {payment.transaction_id} for parcel {payment.parcel_id}")
            raise Conflict("Transaction already recorded") from e
        except Conflict:
            raise
        except Exception:
            self.db.rollback()
            logger.exception(
                f"Payment recording failed for parcel {payment.parcel_id} "
                f"(transaction {payment.transaction_id}); parcel left unpaid, needs reconciliation with processor"
            )
            raise

        self.db.refresh(payment)
        return payment
