from . import create_app

app = create_app()

if __name__ == "__main__":
    with app.app_context():
        from .extensions import db
        db.create_all()
    # Development server only; run behind a real WSGI server (gunicorn/uWSGI) in production
    app.run(host="127.0.0.1", port=5000, debug=True)
