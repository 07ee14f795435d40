from .base_route import base_bp
from .dashboard import dashboard_bp
from .classrooms import classrooms_bp
from .students import students_bp
from .attendance import attendance_bp

def register_routes(app):
    app.register_blueprint(base_bp)
    app.register_blueprint(dashboard_bp, url_prefix="/dashboard")
    app.register_blueprint(classrooms_bp, url_prefix='/classrooms')
    app.register_blueprint(students_bp, url_prefix='/students')
    app.register_blueprint(attendance_bp, url_prefix='/attendance')
