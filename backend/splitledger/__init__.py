from flask import Flask
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from splitledger.config import Config
from splitledger.extensions import init_mongo

jwt = JWTManager()

def create_app(config_class=Config, mongo_client=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Disable strict slashes to prevent 308 redirects that break CORS preflight
    app.url_map.strict_slashes = False

    CORS(
        app,
        supports_credentials=True,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}}
    )
    # Init extensions
    init_mongo(app, client=mongo_client)
    jwt.init_app(app)

    # Register blueprints
    from splitledger.expenses.routes import expenses_bp
    from splitledger.users.routes import users_bp

    app.register_blueprint(expenses_bp, url_prefix='/api/v1/expenses')
    app.register_blueprint(users_bp, url_prefix='/api/v1/users')

    return app
