from billing.extensions import db
from billing.models.document import DocumentMixin, TotalsMixin, iso
import enum


class QuoteStatus(enum.Enum):
    DRAFT = "brouillon"
    SENT = "envoye"
    ACCEPTED = "accepte"
    REFUSED = "refuse"
    EXPIRED = "expire"


class Quote(DocumentMixin, TotalsMixin, db.Model):
    __tablename__ = 'devis'

    KIND = 'devis'
    PREFIX = 'D'

    expiration_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.Enum(QuoteStatus), default=QuoteStatus.DRAFT, nullable=False)
    payment_terms = db.Column(db.Text)

    client = db.relationship('Client', back_populates='quotes')
    lines = db.relationship('DocumentLine', back_populates='quote',
                            cascade='all, delete-orphan', order_by='DocumentLine.position')

    def to_dict(self):
        data = self.header_dict()
        data.update(self.totals_dict())
        data['dateExpiration'] = iso(self.expiration_date)
        data['conditionsReglement'] = self.payment_terms
        return data

    def __repr__(self):
        return f'<Quote {self.number}>'
