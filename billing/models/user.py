from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from billing.extensions import db
from billing.models.document import iso
from datetime import datetime

ROLES = ('admin', 'user')


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(50))
    active = db.Column(db.Boolean, default=True, nullable=False)
    role = db.Column(db.String(20), default='user', nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_active(self):
        return bool(self.active)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password, method='pbkdf2:sha256')

    def check_password(self, password):
        return check_password_hash(self.password_hash, password or '')

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'nom': self.name,
            'telephone': self.phone,
            'role': self.role,
            'actif': bool(self.active),
            'dateCreation': iso(self.created_at),
        }
