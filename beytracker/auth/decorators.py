"""Decorators for the auth package."""

from functools import wraps

from flask import abort, flash, redirect, session, url_for


def login_required(f=None, admin_required=False):
    """Reject the request if the user is not signed in.

    Pages redirect to the application root; JSON endpoints answer 401.

    Usage:
    @login_required
    def protected_view():
        ...

    @login_required(admin_required=True)
    def admin_view():
        ...
    """

    def decorator(func):
        @wraps(func)
        def decorated_function(*args, **kwargs):
            if "user_id" not in session:
                if func.__name__.startswith("api_"):
                    abort(401)
                return redirect(url_for("index"))
            if admin_required and not session.get("is_admin"):
                if func.__name__.startswith("api_"):
                    abort(403)
                flash("You are not authorized to view this page.", "danger")
                return redirect(url_for("index"))
            return func(*args, **kwargs)

        return decorated_function

    if f:
        return decorator(f)
    return decorator
