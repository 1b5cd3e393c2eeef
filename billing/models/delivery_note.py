from billing.extensions import db
from billing.models.document import DocumentMixin, iso
import enum


class DeliveryNoteStatus(enum.Enum):
    PREPARED = "prepare"
    SHIPPED = "expediee"
    DELIVERED = "livree"


class DeliveryNote(DocumentMixin, db.Model):
    """Bon de livraison. Carries lines but never monetary totals."""
    __tablename__ = 'bons_livraison'

    KIND = 'bon-livraison'
    PREFIX = 'BL'

    delivery_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.Enum(DeliveryNoteStatus), default=DeliveryNoteStatus.PREPARED, nullable=False)

    client = db.relationship('Client', back_populates='delivery_notes')
    lines = db.relationship('DocumentLine', back_populates='delivery_note',
                            cascade='all, delete-orphan', order_by='DocumentLine.position')

    def to_dict(self):
        data = self.header_dict()
        data['dateLivraison'] = iso(self.delivery_date)
        return data

    def __repr__(self):
        return f'<DeliveryNote {self.number}>'
