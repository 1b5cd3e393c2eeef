from billing import create_app
from billing.extensions import db

app = create_app()

if __name__ == '__main__':
    with app.app_context():
        # Auto-create tables for local runs
        # (In prod, use flask db upgrade)
        db.create_all()
    app.run(debug=True)
