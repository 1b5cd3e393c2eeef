import logging
from datetime import datetime, timezone

from flask import Flask, jsonify

from .config import DevelopmentConfig
from .extensions import db, migrate, login_manager


def create_app(config_class=DevelopmentConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )

    # Initialize Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Import models
    from billing import models  # noqa: F401

    from billing.errors import register_error_handlers
    register_error_handlers(app)

    from billing.security import unauthorized
    login_manager.unauthorized_handler(unauthorized)

    from billing.services import formatting
    app.add_template_filter(formatting.format_currency, 'currency')
    app.add_template_filter(formatting.format_date, 'date_fr')
    app.add_template_filter(formatting.format_percent, 'percent')
    app.add_template_filter(formatting.amount_in_words, 'in_words')

    # Register Blueprints
    prefix = app.config['API_PREFIX']

    from billing.routes.auth import bp as auth_bp
    app.register_blueprint(auth_bp, url_prefix=f'{prefix}/auth')

    from billing.routes.users import bp as users_bp
    app.register_blueprint(users_bp, url_prefix=f'{prefix}/users')

    from billing.routes.clients import bp as clients_bp
    app.register_blueprint(clients_bp, url_prefix=f'{prefix}/clients')

    from billing.routes.products import bp as products_bp
    app.register_blueprint(products_bp, url_prefix=f'{prefix}/produits')

    from billing.routes.invoices import bp as invoices_bp
    app.register_blueprint(invoices_bp, url_prefix=f'{prefix}/factures')

    from billing.routes.quotes import bp as quotes_bp
    app.register_blueprint(quotes_bp, url_prefix=f'{prefix}/devis')

    from billing.routes.delivery_notes import bp as delivery_notes_bp
    app.register_blueprint(delivery_notes_bp, url_prefix=f'{prefix}/bons-livraison')

    from billing.routes.payments import bp as payments_bp
    app.register_blueprint(payments_bp, url_prefix=f'{prefix}/paiements')

    from billing.routes.settings import bp as settings_bp
    app.register_blueprint(settings_bp, url_prefix=f'{prefix}/settings')

    @app.route('/health')
    def health():
        return jsonify({
            'success': True,
            'message': 'NGBilling API is running',
            'timestamp': datetime.now(timezone.utc).isoformat(),
        })

    # User loader
    from billing.models.user import User

    @login_manager.user_loader
    def load_user(user_id):
        user = db.session.get(User, int(user_id))
        if user is None or not user.is_active:
            return None
        return user

    return app
