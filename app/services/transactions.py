"""Append-only store of normalized Mobbex webhooks."""
from typing import Any

from sqlmodel import Session, select

from app.models import MobbexTransaction


class TransactionStore:
    def __init__(self, db: Session):
        self.db = db

    def save(self, data: dict[str, Any]) -> MobbexTransaction:
        """Always inserts a new row; previous rows are never touched."""
        row = MobbexTransaction.from_webhook_data(data)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def for_order(self, order_id: int | str) -> list[MobbexTransaction]:
        stmt = (
            select(MobbexTransaction)
            .where(MobbexTransaction.order_id == str(order_id))
            .order_by(MobbexTransaction.id)
        )
        return list(self.db.exec(stmt).all())

