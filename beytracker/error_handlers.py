from flask import (
    Blueprint,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_wtf.csrf import CSRFError

from .errors import AppError, DataSourceError, NotFoundError, ValidationError

error_handlers_bp = Blueprint("error_handlers", __name__)


def _wants_json():
    """JSON endpoints are named ``api_*``; everything else renders a page."""
    endpoint = request.endpoint or ""
    return (
        endpoint.rsplit(".", 1)[-1].startswith("api_")
        or request.is_json
        or request.accept_mimetypes.best == "application/json"
    )


def _render_error(error, template="error.html"):
    if _wants_json():
        return jsonify({"error": error.message}), error.status_code
    return render_template(template, error=error.message), error.status_code


@error_handlers_bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    """Handles validation errors by rendering a generic error page."""
    current_app.logger.warning(f"Validation Error: {error.message}")
    return _render_error(error)


@error_handlers_bp.app_errorhandler(NotFoundError)
def handle_not_found_error(error):
    """Handles not found errors."""
    current_app.logger.warning(f"Not Found Error: {error.message}")
    return _render_error(error, "404.html")


@error_handlers_bp.app_errorhandler(DataSourceError)
def handle_data_source_error(error):
    """Handles failures of the remote data source."""
    current_app.logger.error(f"Data Source Error: {error.message}")
    # Avoid exposing raw backend error details to the user
    error.message = "A database error occurred. Please try again later."
    return _render_error(error)


@error_handlers_bp.app_errorhandler(AppError)
def handle_app_error(error):
    """Handles generic application errors."""
    current_app.logger.error(f"Application Error: {error.message}")
    return _render_error(error)


@error_handlers_bp.app_errorhandler(404)
def handle_404(e):
    """Handles generic 404 errors for routes that don't exist."""
    if _wants_json():
        return jsonify({"error": "Not found"}), 404
    return render_template("404.html"), 404


@error_handlers_bp.app_errorhandler(500)
def handle_500(e):
    """Handles unexpected server errors."""
    current_app.logger.error(f"Internal Server Error: {e}")
    if _wants_json():
        return jsonify({"error": "Internal server error"}), 500
    return render_template("500.html"), 500


@error_handlers_bp.app_errorhandler(CSRFError)
def handle_csrf_error(e):
    """
    Handles CSRF errors, which usually indicate a session timeout or invalid form submission.
    """
    current_app.logger.warning(f"CSRF Error: {e.description}")
    flash("Your session may have expired. Please try your action again.", "warning")
    return redirect(request.referrer or url_for("tournament.wizard_step", step=0))
