from billing.extensions import db
from datetime import datetime


class Client(db.Model):
    __tablename__ = 'clients'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), unique=True, nullable=False)  # CLT-00001

    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    phone = db.Column(db.String(50), nullable=False)

    address = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    postal_code = db.Column(db.String(20), nullable=False)
    country = db.Column(db.String(100), nullable=False)

    # Matricule fiscal
    tax_id = db.Column(db.String(50))

    # Sum of the client's invoice totals, refreshed on every invoice write
    total_invoiced = db.Column(db.Numeric(14, 3), default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    invoices = db.relationship('Invoice', back_populates='client', cascade='all, delete-orphan')
    quotes = db.relationship('Quote', back_populates='client', cascade='all, delete-orphan')
    delivery_notes = db.relationship('DeliveryNote', back_populates='client', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'nom': self.name,
            'email': self.email,
            'telephone': self.phone,
            'adresse': self.address,
            'ville': self.city,
            'codePostal': self.postal_code,
            'pays': self.country,
            'mf': self.tax_id,
            'totalFacture': float(self.total_invoiced or 0),
            'dateCreation': self.created_at.isoformat() if self.created_at else None,
            'dateModification': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Client {self.code} {self.name}>'
