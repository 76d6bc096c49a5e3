"""
Prometheus metrics shared by the API and the game services
"""

from prometheus_client import Counter, Gauge, Histogram

# HTTP metrics
REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])
ACTIVE_CONNECTIONS = Gauge('http_active_connections', 'Number of active HTTP connections')

# Wagering metrics
BETS_PLACED = Counter('bets_placed_total', 'Total bets placed', ['game_type', 'currency'])
BETS_SETTLED = Counter('bets_settled_total', 'Total bets settled', ['game_type', 'outcome'])
BETS_CANCELLED = Counter('bets_cancelled_total', 'Total bets cancelled', ['game_type'])
REJECTED_ACTIONS = Counter('gaming_rejections_total', 'Operations rejected with a domain error', ['code'])

# Staking metrics
POSITIONS_OPENED = Counter('positions_opened_total', 'Staking and vesting positions opened', ['kind'])
POSITIONS_CLOSED = Counter('positions_closed_total', 'Staking and vesting positions closed', ['kind', 'status'])
