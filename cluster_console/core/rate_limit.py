from slowapi import Limiter

from cluster_console.core import config
from cluster_console.features.users.dependencies import get_authorization_header

limiter = Limiter(key_func=get_authorization_header, default_limits=[], enabled=config.RATE_LIMIT_ENABLED)

LOGIN_RATE_LIMIT = config.LOGIN_RATE_LIMIT
