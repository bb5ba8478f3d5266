from .exports import exports_bp

def register_blueprints(app):
    app.register_blueprint(exports_bp)
