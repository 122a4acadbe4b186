from .invitations import admin_bp, registration_bp


def register_blueprints(app):
    """Register all blueprints with the Flask app"""
    app.register_blueprint(admin_bp)
    app.register_blueprint(registration_bp)
