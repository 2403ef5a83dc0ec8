"""Session helpers shared by the blueprints.

Authentication itself is handled by the surrounding application, which puts
the signed-in user's id in ``session["user_id"]``.
"""
