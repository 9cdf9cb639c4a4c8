"""auto_shared — Shared gateway core for the AUTO control-plane Lambdas.

Provides:
    - Immutable process configuration (GatewayConfig)
    - Shared-secret authorization gate
    - Request-scoped AWS credential bundles
    - Allow-listed cloud operation registry
    - Suffix router and CORS response helpers
"""

__version__ = "1.0.0"
