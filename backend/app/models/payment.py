"""
Modèle SQLAlchemy pour les paiements élève → tuteur.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String

from app.database import Base


class PaymentRecord(Base):
    __tablename__ = "payment_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    tutor_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    amount_paid = Column(Numeric(10, 2), nullable=False)
    means_of_payment = Column(String(20), nullable=False)  # CASH, BANK_TRANSFER, BLIK
    paid_on = Column(DateTime, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}
