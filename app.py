from flask import Flask, jsonify
from flask_login import LoginManager
from flask_migrate import Migrate
from models import db, User
from routes import register_blueprints

def create_app(config_object='config.Config'):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Initialize extensions
    db.init_app(app)
    migrate = Migrate(app, db)

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Export endpoints answer unauthenticated requests with JSON
    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Authentication required'}), 401

    register_blueprints(app)

    return app

app = create_app()

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(host='0.0.0.0', port=5005, debug=True)
