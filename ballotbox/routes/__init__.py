from ballotbox.routes.auth import register_auth_routes
from ballotbox.routes.votes import register_vote_routes


def register_routes(app):
    register_auth_routes(app)
    register_vote_routes(app)
