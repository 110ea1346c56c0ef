from flask import Flask

from ballotbox.cli import register_cli
from ballotbox.config import Config
from ballotbox.extensions import db, login_manager, migrate
from ballotbox.routes import register_routes
from ballotbox.services.security import load_user_from_request


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    login_manager.request_loader(load_user_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        return {"error": "Authorization required", "code": "unauthenticated"}, 401

    register_routes(app)
    register_cli(app)
    return app


__all__ = ["db", "migrate", "create_app"]
