"""
Pong match engine package: the frame-stepped simulation core (pong.engine),
settings validation (pong.config), result payloads and a headless runner.
"""
