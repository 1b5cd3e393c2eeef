"""Columns and behaviour shared by invoices, quotes and delivery notes.

All three kinds store their rows in ``lignes_document``; a nullable foreign
key per parent kind says which document owns a line.
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import declared_attr

from billing.extensions import db


def iso(value):
    return value.isoformat() if value else None


def to_decimal(value):
    return Decimal(str(value)) if value is not None else Decimal('0')


class DocumentLine(db.Model):
    __tablename__ = 'lignes_document'

    id = db.Column(db.Integer, primary_key=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    # Product link; name/description below are the snapshot taken at write time
    product_id = db.Column(db.Integer, db.ForeignKey('produits.id', ondelete='SET NULL'))
    product_name = db.Column(db.String(150), nullable=False)
    product_description = db.Column(db.Text)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 3), nullable=False, default=0)
    discount_percent = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    line_total = db.Column(db.Numeric(14, 3), nullable=False, default=0)

    # Owner (exactly one is set)
    invoice_id = db.Column(db.Integer, db.ForeignKey('factures.id', ondelete='CASCADE'))
    quote_id = db.Column(db.Integer, db.ForeignKey('devis.id', ondelete='CASCADE'))
    delivery_note_id = db.Column(db.Integer, db.ForeignKey('bons_livraison.id', ondelete='CASCADE'))

    product = db.relationship('Product', back_populates='lines')
    invoice = db.relationship('Invoice', back_populates='lines')
    quote = db.relationship('Quote', back_populates='lines')
    delivery_note = db.relationship('DeliveryNote', back_populates='lines')

    def to_dict(self):
        return {
            'id': self.id,
            'produitId': self.product_id,
            'produitNom': self.product_name,
            'produitDescription': self.product_description,
            'quantite': self.quantity,
            'prixUnitaire': float(self.unit_price or 0),
            'remise': float(self.discount_percent or 0),
            'total': float(self.line_total or 0),
        }


class DocumentMixin:
    """Header shared by every commercial document."""

    KIND = None
    PREFIX = None

    id = db.Column(db.Integer, primary_key=True)
    number = db.Column(db.String(50), unique=True, nullable=False)

    # Client name is a snapshot; later client edits do not touch issued documents
    client_name = db.Column(db.String(150), nullable=False)
    issue_date = db.Column(db.Date, nullable=False, default=lambda: datetime.utcnow().date())
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @declared_attr
    def client_id(cls):
        return db.Column(db.Integer, db.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False)

    def header_dict(self):
        return {
            'id': self.id,
            'numero': self.number,
            'clientId': self.client_id,
            'clientNom': self.client_name,
            'dateCreation': iso(self.issue_date),
            'statut': self.status.value if self.status else None,
            'notes': self.notes,
            'lignes': [line.to_dict() for line in self.lines],
            'dateModification': iso(self.updated_at),
        }


class TotalsMixin:
    """Stored monetary totals of invoices and quotes."""

    subtotal = db.Column(db.Numeric(14, 3), nullable=False, default=0)
    global_discount_percent = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    tax_enabled = db.Column(db.Boolean, nullable=False, default=True)
    tax = db.Column(db.Numeric(14, 3), nullable=False, default=0)
    total = db.Column(db.Numeric(14, 3), nullable=False, default=0)

    @property
    def discount_amount(self):
        return to_decimal(self.subtotal) * to_decimal(self.global_discount_percent) / 100

    @property
    def net_subtotal(self):
        return to_decimal(self.subtotal) - self.discount_amount

    def apply_totals(self, totals, global_discount_percent, tax_enabled):
        self.subtotal = totals['subtotal']
        self.global_discount_percent = global_discount_percent
        self.tax_enabled = tax_enabled
        self.tax = totals['tax']
        self.total = totals['total']

    def totals_dict(self):
        return {
            'sousTotal': float(to_decimal(self.subtotal)),
            'remiseTotale': float(to_decimal(self.global_discount_percent)),
            'remiseMontant': float(self.discount_amount),
            'sousTotalApresRemise': float(self.net_subtotal),
            'appliquerTVA': bool(self.tax_enabled),
            'tva': float(to_decimal(self.tax)),
            'total': float(to_decimal(self.total)),
        }
