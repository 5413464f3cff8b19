"""
Business services.

Each module exposes one service class bound to an AsyncSession and a
`get_<name>_service` factory used by the endpoints.
"""
