import os

from billing import create_app
from billing.extensions import db
from billing.models.user import User
from billing.services.settings_store import SettingsStore

app = create_app()

with app.app_context():
    db.create_all()  # Creates tables if they don't exist

    store = SettingsStore()
    if not store.company():
        print("Creating default company settings...")
        store.update({
            'company': {
                'name': 'NGBilling',
                'address': 'Tunis, Tunisie',
            },
        })

    email = os.environ.get('ADMIN_EMAIL', 'admin@ngbilling.tn')
    if not User.query.filter_by(email=email).first():
        admin = User(email=email, name='Administrateur', role='admin')
        admin.set_password(os.environ.get('ADMIN_PASSWORD', 'admin123'))
        db.session.add(admin)
        db.session.commit()
        print(f"Database seeded! Login with {email}")
    else:
        print("Admin user already exists.")
