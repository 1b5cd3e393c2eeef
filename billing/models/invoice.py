from billing.extensions import db
from billing.models.document import DocumentMixin, TotalsMixin, iso
import enum


class InvoiceStatus(enum.Enum):
    DRAFT = "brouillon"
    SENT = "envoyee"
    PAID = "payee"
    OVERDUE = "en_retard"
    CANCELLED = "annulee"


class Invoice(DocumentMixin, TotalsMixin, db.Model):
    __tablename__ = 'factures'

    KIND = 'facture'
    PREFIX = 'F'

    due_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.Enum(InvoiceStatus), default=InvoiceStatus.DRAFT, nullable=False)

    client = db.relationship('Client', back_populates='invoices')
    lines = db.relationship('DocumentLine', back_populates='invoice',
                            cascade='all, delete-orphan', order_by='DocumentLine.position')
    payments = db.relationship('Payment', back_populates='invoice',
                               cascade='all, delete-orphan', order_by='Payment.payment_date.desc()')

    def to_dict(self):
        data = self.header_dict()
        data.update(self.totals_dict())
        data['dateEcheance'] = iso(self.due_date)
        return data

    def __repr__(self):
        return f'<Invoice {self.number}>'
