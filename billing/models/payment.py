from billing.extensions import db
from billing.models.document import iso
from datetime import datetime
import enum


class PaymentMethod(enum.Enum):
    CASH = "especes"
    CARD = "carte"
    TRANSFER = "virement"
    CHECK = "cheque"
    PAYPAL = "paypal"
    STRIPE = "stripe"


class PaymentStatus(enum.Enum):
    PENDING = "en_attente"
    CONFIRMED = "confirme"
    REFUSED = "refuse"


class Payment(db.Model):
    __tablename__ = 'paiements'

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey('factures.id', ondelete='CASCADE'), nullable=False)

    amount = db.Column(db.Numeric(14, 3), nullable=False)
    payment_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    method = db.Column(db.Enum(PaymentMethod), default=PaymentMethod.TRANSFER, nullable=False)
    status = db.Column(db.Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)

    reference = db.Column(db.String(100))
    notes = db.Column(db.Text)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    invoice = db.relationship('Invoice', back_populates='payments')

    def to_dict(self):
        return {
            'id': self.id,
            'factureId': self.invoice_id,
            'factureNumero': self.invoice.number if self.invoice else None,
            'montant': float(self.amount or 0),
            'datePaiement': iso(self.payment_date),
            'methode': self.method.value,
            'statut': self.status.value,
            'reference': self.reference,
            'notes': self.notes,
            'dateModification': iso(self.updated_at),
        }
