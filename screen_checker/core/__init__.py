"""screen_checker.core: foundation layer.

Types, errors, environment config, Pillow helpers, the artifact store,
output format resolution and the report builder. Nothing here depends on
screen_checker.tester or the diff engine.
"""
