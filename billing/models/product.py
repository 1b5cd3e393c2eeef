from billing.extensions import db
from datetime import datetime


class Product(db.Model):
    __tablename__ = 'produits'

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(150), unique=True, nullable=False)
    description = db.Column(db.Text, default='')
    price = db.Column(db.Numeric(12, 3), nullable=False, default=0)
    category = db.Column(db.String(100), nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Lines keep their own name/description snapshot; no cascade from here.
    lines = db.relationship('DocumentLine', back_populates='product')

    def to_dict(self):
        return {
            'id': self.id,
            'nom': self.name,
            'description': self.description or '',
            'prix': float(self.price or 0),
            'categorie': self.category,
            'actif': bool(self.active),
            'dateCreation': self.created_at.isoformat() if self.created_at else None,
            'dateModification': self.updated_at.isoformat() if self.updated_at else None,
        }
